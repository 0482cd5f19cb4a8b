import os

# Settings() wird beim Import gebaut und braucht einen API-Key
os.environ.setdefault("LLM_API_KEY", "test-key")
os.environ.setdefault("LLM_BASE_URL", "http://llm.test/v1")

import pytest  # noqa: E402

from docqa.store import DocumentStore  # noqa: E402


class StubLLM:
    """Ersetzt LLMAdapter: liefert feste Fragmente und merkt sich die Nachrichten."""

    def __init__(self, fragments=None, fail_after=None, error=None):
        self.fragments = list(fragments or [])
        self.fail_after = fail_after
        self.error = error or RuntimeError("connection reset")
        self.calls = []
        self.started = False
        self.stopped = False

    async def startup(self):
        self.started = True

    async def shutdown(self):
        self.stopped = True

    async def warmup(self):
        pass

    async def stream(self, messages):
        self.calls.append(messages)
        for i, fragment in enumerate(self.fragments):
            if self.fail_after is not None and i >= self.fail_after:
                raise self.error
            yield fragment
        if self.fail_after is not None and self.fail_after >= len(self.fragments):
            raise self.error


@pytest.fixture()
def store():
    return DocumentStore()


@pytest.fixture()
def stub_llm():
    return StubLLM(fragments=["Blue"])
