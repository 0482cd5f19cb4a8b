# docqa/prompting.py
from __future__ import annotations
from typing import Dict

from .errors import InvalidInputError


REFUSALS: Dict[str, str] = {
    "en": "I don't know based on the information provided.",
    "pt": "Não sei com base nas informações fornecidas.",
    "de": "Ich weiß es nicht anhand der bereitgestellten Informationen.",
}

PROMPT_TEMPLATES: Dict[str, str] = {
    "en": """\
Based on the following text, which is your only source of information:

{document}

Answer the question: {question}

Answer only if the answer is contained in the text provided. Use only facts from that text. \
If the answer is not in the text, reply exactly "{refusal}"
""",
    "pt": """\
Baseado no texto a seguir, que é sua única fonte de informação:

{document}

Responda a pergunta: {question}

Responda apenas se a resposta estiver no texto fornecido. Use somente fatos desse texto. \
Se a resposta não estiver no texto, responda exatamente "{refusal}"
""",
    "de": """\
Grundlage ist ausschließlich der folgende Text:

{document}

Beantworte die Frage: {question}

Antworte nur, wenn die Antwort im bereitgestellten Text steht. Nutze nur Fakten aus diesem Text. \
Steht die Antwort nicht im Text, antworte genau "{refusal}"
""",
}


class PromptBuilder:
    """
    Baut den Grounding-Prompt aus Basistext + Frage.
    Reihenfolge: Einleitung -> Dokument (wörtlich) -> Frage (wörtlich) -> Regel + Refusal-Satz.
    """
    def __init__(self, language: str = "en") -> None:
        if language not in REFUSALS:
            raise ValueError(f"Unsupported prompt language: {language}")
        self.language = language

    @property
    def refusal(self) -> str:
        return REFUSALS[self.language]

    def is_refusal(self, answer: str) -> bool:
        return (answer or "").strip() == self.refusal

    def build_prompt(self, document: str, question: str) -> str:
        if not (document or "").strip():
            raise InvalidInputError("Document is empty.")
        if not (question or "").strip():
            raise InvalidInputError("Question is empty.")
        # kein str.format auf Nutzertext: Dokument/Frage dürfen geschweifte Klammern enthalten
        template = PROMPT_TEMPLATES[self.language]
        head, rest = template.split("{document}", 1)
        middle, tail = rest.split("{question}", 1)
        return head + document + middle + question + tail.replace("{refusal}", self.refusal)
