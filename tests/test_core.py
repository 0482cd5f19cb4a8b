import asyncio
import json
import logging

import httpx
import pytest

from conftest import StubLLM
from docqa.core import ApplicationCore
from docqa.errors import NoDocumentError, ProviderError, QuestionRequiredError
from docqa.prompting import PromptBuilder


def make_core(store, llm, answer_timeout=None):
    return ApplicationCore(store, PromptBuilder(), llm, answer_timeout=answer_timeout)


def test_ask_aggregates_fragments_in_order(store):
    llm = StubLLM(fragments=["Par", "is is", " the capital."])
    answer = asyncio.run(make_core(store, llm).ask("doc", "prompt"))
    assert answer == "Paris is the capital."


def test_ask_trims_and_skips_empty_fragments(store):
    llm = StubLLM(fragments=["  ", None, "Blue", "", None, "\n"])
    answer = asyncio.run(make_core(store, llm).ask("doc", "prompt"))
    assert answer == "Blue"


def test_ask_with_zero_fragments_returns_empty_string(store):
    llm = StubLLM(fragments=[])
    assert asyncio.run(make_core(store, llm).ask("doc", "prompt")) == ""


def test_ask_sends_document_then_prompt(store):
    llm = StubLLM(fragments=["ok"])
    asyncio.run(make_core(store, llm).ask("the doc", "the prompt"))
    assert llm.calls == [[
        {"role": "user", "content": "the doc"},
        {"role": "user", "content": "the prompt"},
    ]]


@pytest.mark.parametrize("document", ["", "   \n"])
def test_ask_without_document_never_contacts_llm(store, document):
    llm = StubLLM(fragments=["x"])
    with pytest.raises(NoDocumentError):
        asyncio.run(make_core(store, llm).ask(document, "prompt"))
    assert llm.calls == []


def test_failure_mid_stream_raises_provider_error(store):
    llm = StubLLM(fragments=["Par", "is"], fail_after=1, error=RuntimeError("connection reset"))
    with pytest.raises(ProviderError) as exc_info:
        asyncio.run(make_core(store, llm).ask("doc", "prompt"))
    assert exc_info.value.message == "connection reset"
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_httpx_errors_are_wrapped(store):
    llm = StubLLM(fragments=[], fail_after=0, error=httpx.ConnectError("boom"))
    with pytest.raises(ProviderError, match="boom"):
        asyncio.run(make_core(store, llm).ask("doc", "prompt"))


def test_socket_timeout_keeps_original_message_without_deadline(store):
    llm = StubLLM(fragments=["a"], fail_after=0, error=TimeoutError("socket read timed out"))
    with pytest.raises(ProviderError) as exc_info:
        asyncio.run(make_core(store, llm).ask("doc", "prompt"))
    assert exc_info.value.message == "socket read timed out"
    assert isinstance(exc_info.value.__cause__, TimeoutError)


def test_socket_timeout_keeps_original_message_with_deadline(store):
    llm = StubLLM(fragments=["a"], fail_after=0, error=TimeoutError("socket read timed out"))
    with pytest.raises(ProviderError) as exc_info:
        asyncio.run(make_core(store, llm, answer_timeout=5.0).ask("doc", "prompt"))
    assert exc_info.value.message == "socket read timed out"


class SlowLLM(StubLLM):
    async def stream(self, messages):
        self.calls.append(messages)
        yield "partial"
        await asyncio.sleep(5)
        yield "never"


def test_answer_timeout_raises_provider_error(store):
    core = make_core(store, SlowLLM(), answer_timeout=0.05)
    with pytest.raises(ProviderError, match="did not answer"):
        asyncio.run(core.ask("doc", "prompt"))


def test_answer_question_end_to_end(store):
    store.set_document("The sky is blue.")
    llm = StubLLM(fragments=["Blue"])
    core = make_core(store, llm)

    answer = asyncio.run(core.answer_question("What color is the sky?"))

    assert answer == "Blue"
    doc_turn, prompt_turn = llm.calls[0]
    assert doc_turn["content"] == "The sky is blue."
    assert "The sky is blue." in prompt_turn["content"]
    assert "What color is the sky?" in prompt_turn["content"]
    assert core.prompting.refusal in prompt_turn["content"]


def test_answer_question_passes_refusal_through_unchanged(store):
    store.set_document("The sky is blue.")
    refusal = PromptBuilder().refusal
    core = make_core(store, StubLLM(fragments=[refusal]))

    answer = asyncio.run(core.answer_question("What is the capital of France?"))

    assert answer == refusal
    assert core.prompting.is_refusal(answer)


def test_answer_question_requires_question(store):
    store.set_document("doc")
    llm = StubLLM(fragments=["x"])
    with pytest.raises(QuestionRequiredError):
        asyncio.run(make_core(store, llm).answer_question("  "))
    assert llm.calls == []


def test_answer_question_requires_document(store):
    llm = StubLLM(fragments=["x"])
    with pytest.raises(NoDocumentError):
        asyncio.run(make_core(store, llm).answer_question("Why?"))
    assert llm.calls == []


def test_answer_question_logs_metrics(store, caplog):
    store.set_document("doc")
    core = make_core(store, StubLLM(fragments=["a", "b"]))

    with caplog.at_level(logging.INFO, logger="metrics"):
        asyncio.run(core.answer_question("q?"))

    records = [r for r in caplog.records if r.name == "metrics"]
    assert len(records) == 1
    metrics = json.loads(records[0].getMessage())
    assert metrics["ok"] is True
    assert metrics["sizes"] == {"answer_chars": 2, "fragments": 2}


def test_failed_answer_logs_error_type(store, caplog):
    core = make_core(store, StubLLM(fragments=["x"]))

    with caplog.at_level(logging.INFO, logger="metrics"):
        with pytest.raises(NoDocumentError):
            asyncio.run(core.answer_question("q?"))

    metrics = json.loads([r for r in caplog.records if r.name == "metrics"][0].getMessage())
    assert metrics["ok"] is False
    assert metrics["error_type"] == "no_document"
