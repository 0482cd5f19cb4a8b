"""
Paket für den Dokument-QA-Dienst.
Struktur:
- config.py      : Konfiguration via Pydantic Settings
- errors.py      : Fehler-Taxonomie (Client / Vorbedingung / Provider)
- store.py       : DocumentStore (genau ein Basistext im Speicher)
- prompting.py   : PromptBuilder (Grounding-Prompt, Refusal-Satz)
- llm.py         : LLMAdapter (Streaming, OpenAI-kompatibel oder Gemini)
- core.py        : ApplicationCore (Frage -> Prompt -> Stream -> Antwort)
- api.py         : FastAPI Endpoints (/health, /upload-text, /ask)
"""
