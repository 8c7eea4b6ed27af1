"""Query pipeline — question → retrieve → pack context → generate.

Two delivery modes share the retrieval half:

* ``answer`` returns the whole response at once and maps safety and quota
  refusals to canned replies.
* ``stream`` publishes ``message-chunk`` events to the session channel as
  fragments arrive, then one completion event carrying the full text. A
  failure mid-stream publishes ``message-error`` and aborts the query.

Every completed query, including the no-match fallback, is handed to the
interaction log.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime

from newsrag.errors import GenerationFailure, QuotaExceeded, SafetyBlocked
from newsrag.llm.base import LLMProvider
from newsrag.pipeline.channel import ChatEvent, SessionChannel
from newsrag.pipeline.interactions import InteractionLog
from newsrag.pipeline.prompts import (
    NEWS_SYSTEM_PROMPT,
    NO_MATCH_RESPONSE,
    QUOTA_FALLBACK,
    SAFETY_FALLBACK,
    STREAM_ERROR,
    build_news_prompt,
)
from newsrag.pipeline.schemas import Interaction, QueryMetrics, QueryResult, QueryState
from newsrag.retrieval.context import ContextAssembler
from newsrag.retrieval.retriever import Retriever
from newsrag.retrieval.schemas import ContextWindow, RetrievalConfig, RetrievalResult

logger = logging.getLogger(__name__)


@dataclass
class _Prepared:
    retrieval: RetrievalResult
    window: ContextWindow | None


class QueryPipeline:
    """Orchestrates retrieval, context assembly and generation for one query."""

    def __init__(
        self,
        retriever: Retriever,
        llm_provider: LLMProvider,
        assembler: ContextAssembler | None = None,
        interaction_log: InteractionLog | None = None,
        retrieval_config: RetrievalConfig | None = None,
        system_prompt: str = NEWS_SYSTEM_PROMPT,
    ):
        self.retriever = retriever
        self.llm_provider = llm_provider
        self.assembler = assembler or ContextAssembler()
        self.interaction_log = interaction_log
        self.retrieval_config = retrieval_config or RetrievalConfig()
        self.system_prompt = system_prompt

    @property
    def model(self) -> str:
        return getattr(self.llm_provider, "model", "unknown")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def answer(
        self,
        query: str,
        session_id: str = "",
        config: RetrievalConfig | None = None,
    ) -> QueryResult:
        """Answer a question in one response.

        Raises:
            EmbeddingFailure: The query could not be embedded.
            SearchFailure: The vector index could not be searched.
            GenerationFailure: The model failed for a reason other than
                a safety block or an exhausted quota.
        """
        started = time.perf_counter()
        trace = [QueryState.RECEIVED]
        prepared = self._prepare(query, config, trace)

        if prepared.window is None:
            return self._fallback(query, session_id, prepared, trace, started)

        self._enter(trace, QueryState.GENERATING)
        prompt = build_news_prompt(query, prepared.window.text)
        try:
            response = self._generate(prompt)
        except GenerationFailure:
            self._fail(trace)
            raise

        return self._complete(query, session_id, response, prepared, trace, started)

    def stream(
        self,
        query: str,
        session_id: str,
        channel: SessionChannel,
        config: RetrievalConfig | None = None,
    ) -> QueryResult:
        """Answer a question, publishing fragments to ``channel`` as they arrive.

        Raises:
            GenerationFailure: After publishing ``message-error`` when the
                fragment stream fails. The query is not retried.
        """
        started = time.perf_counter()
        trace = [QueryState.RECEIVED]
        prepared = self._prepare(query, config, trace)

        if prepared.window is None:
            result = self._fallback(query, session_id, prepared, trace, started)
            self._publish_complete(channel, session_id, result.response)
            return result

        self._enter(trace, QueryState.GENERATING)
        prompt = build_news_prompt(query, prepared.window.text)
        fragments: list[str] = []
        try:
            for fragment in self.llm_provider.stream(prompt, system=self.system_prompt):
                if not fragment:
                    continue
                if trace[-1] is not QueryState.STREAMING_DELTAS:
                    self._enter(trace, QueryState.STREAMING_DELTAS)
                fragments.append(fragment)
                channel.publish(session_id, ChatEvent.MESSAGE_CHUNK, {
                    "sessionId": session_id,
                    "chunk": fragment,
                    "isComplete": False,
                })
        except Exception as exc:
            logger.error("Streaming failed for session %s: %s", session_id, exc)
            channel.publish(session_id, ChatEvent.MESSAGE_ERROR, {
                "sessionId": session_id,
                "error": STREAM_ERROR,
            })
            self._fail(trace)
            if isinstance(exc, GenerationFailure):
                raise
            raise GenerationFailure(f"Streaming generation failed: {exc}") from exc

        full_response = "".join(fragments)
        self._publish_complete(channel, session_id, full_response)
        return self._complete(query, session_id, full_response, prepared, trace, started)

    # ------------------------------------------------------------------
    # Retrieval half
    # ------------------------------------------------------------------

    def _prepare(
        self,
        query: str,
        config: RetrievalConfig | None,
        trace: list[QueryState],
    ) -> _Prepared:
        cfg = config or self.retrieval_config
        logger.info("Processing query: %r", query[:100])

        self._enter(trace, QueryState.EMBEDDING_QUERY)
        try:
            embedding = self.retriever.embed_query(query)
        except Exception:
            self._fail(trace)
            raise

        self._enter(trace, QueryState.SEARCHING)
        try:
            retrieval = self.retriever.search(query, embedding, cfg)
        except Exception:
            self._fail(trace)
            raise

        if not retrieval.results:
            self._enter(trace, QueryState.NO_MATCH)
            return _Prepared(retrieval=retrieval, window=None)

        self._enter(trace, QueryState.ASSEMBLING_CONTEXT)
        window = self.assembler.assemble(query, retrieval.results)
        if not window.chunks:
            logger.warning("No chunk fits the %d-char context budget", self.assembler.budget)
            return _Prepared(retrieval=retrieval, window=None)
        return _Prepared(retrieval=retrieval, window=window)

    # ------------------------------------------------------------------
    # Generation half
    # ------------------------------------------------------------------

    def _generate(self, prompt: str) -> str:
        try:
            text = self.llm_provider.generate(prompt, system=self.system_prompt)
        except SafetyBlocked as exc:
            logger.warning("Generation blocked by safety filter: %s", exc)
            return SAFETY_FALLBACK
        except QuotaExceeded as exc:
            logger.warning("Generation quota exceeded: %s", exc)
            return QUOTA_FALLBACK
        except GenerationFailure:
            raise
        except Exception as exc:
            raise GenerationFailure(f"Failed to generate response: {exc}") from exc

        if not text or not text.strip():
            raise GenerationFailure("Empty response from model")
        return text.strip()

    def _fallback(
        self,
        query: str,
        session_id: str,
        prepared: _Prepared,
        trace: list[QueryState],
        started: float,
    ) -> QueryResult:
        self._enter(trace, QueryState.RESPONDING_FALLBACK)
        metrics = QueryMetrics(
            processing_time_ms=_elapsed_ms(started),
            chunks_found=prepared.retrieval.total_candidates,
        )
        self._enter(trace, QueryState.DONE)
        result = QueryResult(
            query=query,
            response=NO_MATCH_RESPONSE,
            metrics=metrics,
            states=trace,
            model=self.model,
        )
        self._record(session_id, result)
        return result

    def _complete(
        self,
        query: str,
        session_id: str,
        response: str,
        prepared: _Prepared,
        trace: list[QueryState],
        started: float,
    ) -> QueryResult:
        window = prepared.window
        metrics = QueryMetrics(
            processing_time_ms=_elapsed_ms(started),
            chunks_found=prepared.retrieval.total_candidates,
            chunks_used=len(window.chunks),
            context_length=len(window.text),
        )
        self._enter(trace, QueryState.DONE)
        result = QueryResult(
            query=query,
            response=response,
            citations=self.assembler.citations(window.chunks),
            metrics=metrics,
            states=trace,
            model=self.model,
        )
        logger.info(
            "Query processed in %dms: %d/%d chunks used, %d citations",
            metrics.processing_time_ms,
            metrics.chunks_used,
            metrics.chunks_found,
            len(result.citations),
        )
        self._record(session_id, result)
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _record(self, session_id: str, result: QueryResult) -> None:
        if self.interaction_log is None:
            return
        try:
            self.interaction_log.record(Interaction(
                session_id=session_id,
                query=result.query,
                response=result.response,
                citations=list(result.citations),
                metrics=result.metrics,
                created_at=datetime.now(UTC).isoformat(),
            ))
        except Exception as exc:
            logger.warning("Failed to log interaction: %s", exc)

    @staticmethod
    def _publish_complete(channel: SessionChannel, session_id: str, full_response: str) -> None:
        channel.publish(session_id, ChatEvent.MESSAGE_CHUNK, {
            "sessionId": session_id,
            "chunk": "",
            "isComplete": True,
            "fullResponse": full_response,
        })

    @staticmethod
    def _enter(trace: list[QueryState], state: QueryState) -> None:
        logger.debug("Query state %s -> %s", trace[-1], state)
        trace.append(state)

    @classmethod
    def _fail(cls, trace: list[QueryState]) -> None:
        cls._enter(trace, QueryState.ERROR)
        cls._enter(trace, QueryState.DONE)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
