# docqa/core.py
from __future__ import annotations
from typing import Dict, List, Optional, Any
import asyncio
import json
import logging
import time

from .errors import DocQAError, NoDocumentError, ProviderError, QuestionRequiredError
from .llm import LLMAdapter
from .prompting import PromptBuilder
from .store import DocumentStore

log = logging.getLogger(__name__)
metrics_log = logging.getLogger("metrics")


class ApplicationCore:
    """
    Orchestrierung: Frage -> Basistext lesen -> Prompt -> LLM-Stream -> eine aggregierte Antwort.

    Der Basistext wird pro Anfrage genau einmal aus dem Store gelesen. Wird er währenddessen
    ersetzt, bleibt die laufende Anfrage beim gelesenen Stand (keine Snapshot-Isolation darüber hinaus).
    """

    def __init__(
        self,
        store: DocumentStore,
        prompting: PromptBuilder,
        llm: LLMAdapter,
        answer_timeout: Optional[float] = None,
    ) -> None:
        self.store = store
        self.prompting = prompting
        self.llm = llm
        self.answer_timeout = answer_timeout

    async def answer_question(self, question: str) -> str:
        t0 = time.perf_counter()
        stats: Dict[str, Any] = {"t_llm_req": None, "t_first": None, "t_last": None, "fragments": 0, "chars": 0}
        t_prompt_start = None
        t_prompt_end = None
        try:
            if not (question or "").strip():
                raise QuestionRequiredError()
            document = self.store.get_document()
            if not document.strip():
                raise NoDocumentError()

            t_prompt_start = time.perf_counter()
            prompt = self.prompting.build_prompt(document, question)
            t_prompt_end = time.perf_counter()

            answer = await self.ask(document, prompt, stats=stats)
        except DocQAError as e:
            metrics = self._build_metrics(t0, t_prompt_start, t_prompt_end, stats, ok=False, error_type=e.error_type)
            metrics_log.info(json.dumps(metrics, ensure_ascii=False))
            raise

        metrics = self._build_metrics(t0, t_prompt_start, t_prompt_end, stats, ok=True)
        metrics_log.info(json.dumps(metrics, ensure_ascii=False))
        return answer

    async def ask(self, document: str, prompt: str, stats: Optional[Dict[str, Any]] = None) -> str:
        """
        Schickt Basistext + Prompt als zwei User-Turns an das Modell und sammelt den Stream.
        Jeder Fehler des Backends wird zu ProviderError; Teilantworten werden verworfen.
        """
        if not (document or "").strip():
            raise NoDocumentError()

        messages = [
            {"role": "user", "content": document},
            {"role": "user", "content": prompt},
        ]
        stats = stats if stats is not None else {}
        try:
            if self.answer_timeout is None:
                answer = await self._collect(messages, stats)
            else:
                try:
                    answer = await asyncio.wait_for(self._collect(messages, stats), timeout=self.answer_timeout)
                except asyncio.TimeoutError as e:
                    # wait_for wirft ohne Nachricht; ein TimeoutError mit Text kommt aus dem Stream selbst
                    if str(e):
                        raise
                    log.error("LLM answer timed out after %ss", self.answer_timeout)
                    raise ProviderError(f"LLM did not answer within {self.answer_timeout}s") from e
        except ProviderError:
            raise
        except Exception as e:
            log.exception("LLM stream failed")
            raise ProviderError(str(e) or type(e).__name__) from e
        return answer

    async def _collect(self, messages: List[Dict], stats: Dict[str, Any]) -> str:
        parts: List[str] = []
        stats["t_llm_req"] = time.perf_counter()
        async for fragment in self.llm.stream(messages):
            if stats.get("t_first") is None:
                stats["t_first"] = time.perf_counter()
            if fragment:
                parts.append(fragment)
                stats["fragments"] = stats.get("fragments", 0) + 1
                stats["chars"] = stats.get("chars", 0) + len(fragment)
            stats["t_last"] = time.perf_counter()
        return "".join(parts).strip()

    @staticmethod
    def _ms(a: Optional[float], b: Optional[float]) -> Optional[float]:
        if a is None or b is None:
            return None
        return round((b - a) * 1000.0, 2)

    def _build_metrics(
        self,
        t0: float,
        t_p0: Optional[float],
        t_p1: Optional[float],
        stats: Dict[str, Any],
        ok: bool,
        error_type: Optional[str] = None,
    ) -> Dict:
        t_first = stats.get("t_first")
        t_last = stats.get("t_last")
        metrics = {
            "durations_ms": {
                "prompt_build": self._ms(t_p0, t_p1),
                "llm_time_to_first_fragment": self._ms(stats.get("t_llm_req"), t_first),
                "llm_stream_duration": self._ms(t_first, t_last),
                "total": self._ms(t0, time.perf_counter()),
            },
            "sizes": {"answer_chars": stats.get("chars", 0), "fragments": stats.get("fragments", 0)},
            "ok": ok,
        }
        if error_type:
            metrics["error_type"] = error_type
        return metrics
