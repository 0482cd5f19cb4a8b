import pytest

from docqa.errors import ClientInputError, InvalidInputError
from docqa.prompting import REFUSALS, PromptBuilder


def test_prompt_contains_document_question_and_refusal():
    builder = PromptBuilder()
    prompt = builder.build_prompt("The sky is blue.", "What color is the sky?")

    assert "The sky is blue." in prompt
    assert "What color is the sky?" in prompt
    assert "I don't know based on the information provided." in prompt
    assert prompt.index("The sky is blue.") < prompt.index("What color is the sky?")
    assert prompt.index("What color is the sky?") < prompt.index(builder.refusal)


def test_prompt_is_deterministic():
    builder = PromptBuilder()
    assert builder.build_prompt("doc", "q?") == builder.build_prompt("doc", "q?")


def test_prompt_keeps_braces_verbatim():
    builder = PromptBuilder()
    doc = "config = {question} and {refusal} {0}"
    prompt = builder.build_prompt(doc, "What is {x}?")
    assert doc in prompt
    assert "What is {x}?" in prompt


@pytest.mark.parametrize("document,question", [("", "q?"), ("   ", "q?"), ("doc", ""), ("doc", " \n ")])
def test_empty_inputs_raise(document, question):
    with pytest.raises(InvalidInputError):
        PromptBuilder().build_prompt(document, question)


def test_invalid_input_is_client_error():
    assert issubclass(InvalidInputError, ClientInputError)


def test_portuguese_refusal():
    builder = PromptBuilder("pt")
    prompt = builder.build_prompt("O céu é azul.", "Qual a cor do céu?")
    assert builder.refusal == "Não sei com base nas informações fornecidas."
    assert builder.refusal in prompt
    assert "O céu é azul." in prompt


def test_is_refusal():
    builder = PromptBuilder("de")
    assert builder.is_refusal("  " + REFUSALS["de"] + "\n")
    assert not builder.is_refusal("Blau")


def test_unknown_language_rejected():
    with pytest.raises(ValueError):
        PromptBuilder("xx")
