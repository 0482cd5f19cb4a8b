# docqa/llm.py
from __future__ import annotations
from typing import AsyncGenerator, List, Dict, Optional, Any
import json
import logging
import httpx

from .config import Settings
from .errors import MalformedStreamError

log = logging.getLogger(__name__)


class LLMAdapter:
    """
    Streaming-Client für das Delegate-Modell.
    Wird einmal beim App-Start gebaut und an ApplicationCore übergeben (kein globales Singleton).
    stream() liefert Text-Fragmente in Ankunftsreihenfolge; None = Chunk ohne Text.
    """
    def __init__(self, _settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._settings = _settings
        self._transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    def _headers(self) -> Dict[str, str]:
        if self._settings.LLM_PROVIDER == "gemini":
            return {"x-goog-api-key": self._settings.LLM_API_KEY, "Content-Type": "application/json"}
        return {
            "Authorization": f"Bearer {self._settings.LLM_API_KEY}",
            "Content-Type": "application/json",
        }

    async def startup(self) -> None:
        if self.client is None:
            limits = httpx.Limits(max_keepalive_connections=10, max_connections=20)
            self.client = httpx.AsyncClient(
                base_url=self._settings.LLM_BASE_URL,
                timeout=httpx.Timeout(self._settings.LLM_TIMEOUT_SECONDS),
                http2=True,
                limits=limits,
                headers=self._headers(),
                transport=self._transport,
            )

    async def shutdown(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None

    async def warmup(self) -> None:
        """
        Kurzer, nicht-streamender Ping, damit das Modell beim ersten echten Call schon geladen ist.
        """
        await self.startup()
        assert self.client is not None
        ping = [{"role": "user", "content": "ping"}]
        if self._settings.LLM_PROVIDER == "gemini":
            url = f"/models/{self._settings.LLM_MODEL}:generateContent"
            payload = {"contents": self._gemini_contents(ping)}
        else:
            url = "/chat/completions"
            payload = {"model": self._settings.LLM_MODEL, "messages": ping, "max_tokens": 1, "stream": False}
        r = await self.client.post(url, json=payload)
        r.raise_for_status()

    async def stream(self, messages: List[Dict]) -> AsyncGenerator[Optional[str], None]:
        await self.startup()
        assert self.client
        if self._settings.LLM_PROVIDER == "gemini":
            url = f"/models/{self._settings.LLM_MODEL}:streamGenerateContent"
            params = {"alt": "sse"}
            payload: Dict[str, Any] = {
                "contents": self._gemini_contents(messages),
                "generationConfig": {
                    "temperature": self._settings.LLM_TEMPERATURE,
                    "maxOutputTokens": self._settings.LLM_MAX_TOKENS,
                },
            }
            extract = self._extract_gemini_text
        else:
            url = "/chat/completions"
            params = None
            payload = {
                "model": self._settings.LLM_MODEL,
                "messages": messages,
                "temperature": self._settings.LLM_TEMPERATURE,
                "max_tokens": self._settings.LLM_MAX_TOKENS,
                "stream": True,
            }
            extract = self._extract_delta_text

        async with self.client.stream("POST", url, params=params, json=payload) as r:
            r.raise_for_status()
            async for line in r.aiter_lines():
                if not line or not line.startswith("data:"):
                    continue
                chunk = line.removeprefix("data:").strip()
                if chunk == "[DONE]":
                    break
                try:
                    obj = json.loads(chunk)
                except json.JSONDecodeError as e:
                    raise MalformedStreamError(f"Malformed stream chunk: {chunk[:80]!r}") from e
                yield extract(obj)

    # ---------- Parsing ----------
    @staticmethod
    def _gemini_contents(messages: List[Dict]) -> List[Dict]:
        contents = []
        for m in messages:
            role = "model" if m.get("role") == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": m.get("content", "")}]})
        return contents

    @staticmethod
    def _extract_delta_text(obj: Any) -> Optional[str]:
        """
        OpenAI-Stream: choices[0].delta.content.
        Manche Anbieter streamen direkt "content" auf oberster Ebene.
        """
        if not isinstance(obj, dict):
            raise MalformedStreamError(f"Unexpected stream chunk: {obj!r}")
        if "error" in obj:
            err = obj["error"]
            msg = err.get("message") if isinstance(err, dict) else str(err)
            raise MalformedStreamError(f"Provider error in stream: {msg}")
        choices = obj.get("choices") or []
        if choices:
            delta = choices[0].get("delta") or {}
            text = delta.get("content")
            if text is not None:
                return text
        return obj.get("content")

    @staticmethod
    def _extract_gemini_text(obj: Any) -> Optional[str]:
        if not isinstance(obj, dict):
            raise MalformedStreamError(f"Unexpected stream chunk: {obj!r}")
        if "error" in obj:
            err = obj["error"]
            msg = err.get("message") if isinstance(err, dict) else str(err)
            raise MalformedStreamError(f"Provider error in stream: {msg}")
        candidates = obj.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        texts = [p.get("text") for p in parts if isinstance(p, dict) and p.get("text")]
        return "".join(texts) or None
