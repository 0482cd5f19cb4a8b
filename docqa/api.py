# docqa/api.py
from __future__ import annotations
from typing import Any, Dict, Optional
from contextlib import asynccontextmanager
import json
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, settings
from .core import ApplicationCore
from .errors import ClientInputError, DocQAError, QuestionRequiredError
from .llm import LLMAdapter
from .prompting import PromptBuilder
from .store import DocumentStore

log = logging.getLogger(__name__)


async def _read_json_object(request: Request) -> Dict[str, Any]:
    raw = await request.body()
    try:
        body = json.loads(raw or b"{}")
    except ValueError as e:
        raise ClientInputError(f"Invalid JSON body: {e}") from e
    if not isinstance(body, dict):
        raise ClientInputError("JSON body must be an object")
    return body


def create_app(
    _settings: Settings,
    llm: Optional[LLMAdapter] = None,
    store: Optional[DocumentStore] = None,
) -> FastAPI:
    """
    Baut die App mit expliziten Abhängigkeiten (Store, LLM-Client, Core).
    Tests übergeben eigene Instanzen; main.py nutzt die Defaults.
    """
    store = store if store is not None else DocumentStore()
    llm = llm if llm is not None else LLMAdapter(_settings)
    prompting = PromptBuilder(_settings.PROMPT_LANGUAGE)
    core = ApplicationCore(store, prompting, llm, answer_timeout=_settings.ANSWER_TIMEOUT_SECONDS)

    # ---------- Lifespan ----------
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await llm.startup()
        if _settings.LLM_WARMUP:
            try:
                await llm.warmup()
            except Exception as e:
                log.warning(f"Warmup failed: {e}")
        yield
        await llm.shutdown()

    app = FastAPI(title="Document QA", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.store = store
    app.state.core = core

    # ---------- Fehler ----------
    @app.exception_handler(DocQAError)
    async def docqa_error_handler(request: Request, exc: DocQAError):
        log.warning("%s %s -> %s: %s", request.method, request.url.path, exc.error_type, exc.message)
        message = exc.message
        if exc.error_type == "provider_error":
            message = f"AI backend unavailable: {exc.message}"
        return JSONResponse(status_code=exc.status_code, content={"error": message})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        log.exception("Unhandled error in %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    # ---------- Endpoints ----------
    @app.get("/health")
    def health():
        return {"status": "ok", "has_document": store.has_document()}

    @app.post("/upload-text")
    async def upload_text(request: Request):
        """
        Body: { "text": "..." }  (fehlt "text" oder ist null -> Basistext wird geleert)
        Antwort: {"message": "...", "textLength": N}
        """
        body = await _read_json_object(request)
        text = body.get("text")
        if text is not None and not isinstance(text, str):
            raise ClientInputError("Field 'text' must be a string")
        text = text or ""

        store.set_document(text)
        log.info("Base text %s (%d chars)", "set" if text else "cleared", len(text))
        return {
            "message": "Text uploaded successfully" if text else "Text cleared successfully",
            "textLength": len(text),
        }

    @app.post("/ask")
    async def ask(request: Request):
        """
        Body: { "question": "..." }
        Antwort: {"answer": "..."} bzw. {"error": "..."} mit 400/502/500
        """
        body = await _read_json_object(request)
        question = body.get("question")
        if not isinstance(question, str) or not question.strip():
            raise QuestionRequiredError()

        answer = await core.answer_question(question)
        return {"answer": answer}

    return app


app = create_app(settings)
