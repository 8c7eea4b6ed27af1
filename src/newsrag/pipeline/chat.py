"""Chat turn handling on top of the query pipeline.

Publishes the user's message, a typing indicator, and the bot's reply to
the session channel. Fatal query failures become an apology turn instead
of propagating to the host application.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict
from datetime import UTC, datetime
from typing import Any

from newsrag.errors import NewsRagError
from newsrag.pipeline.channel import ChatEvent, SessionChannel
from newsrag.pipeline.prompts import ERROR_TURN
from newsrag.pipeline.query import QueryPipeline
from newsrag.pipeline.schemas import QueryResult

logger = logging.getLogger(__name__)


class ChatService:
    """Runs one chat turn per ``handle_message`` call."""

    def __init__(self, pipeline: QueryPipeline, channel: SessionChannel):
        self.pipeline = pipeline
        self.channel = channel

    def handle_message(
        self,
        session_id: str,
        message: str,
        streaming: bool = False,
    ) -> dict[str, Any]:
        """Answer ``message`` for ``session_id`` and return the bot turn.

        In streaming mode the reply text reaches the channel as
        ``message-chunk`` events and no ``bot-message`` is published unless
        the query fails.
        """
        if not session_id or not message or not message.strip():
            raise ValueError("message and session_id are required")

        self.channel.publish(session_id, ChatEvent.USER_MESSAGE, _turn("user", message))
        self.channel.publish(session_id, ChatEvent.BOT_TYPING, {"typing": True})

        try:
            if streaming:
                result = self.pipeline.stream(message, session_id, self.channel)
            else:
                result = self.pipeline.answer(message, session_id=session_id)
        except NewsRagError as exc:
            logger.error("Query failed for session %s: %s", session_id, exc)
            reply = _turn("assistant", ERROR_TURN, error=True)
            self.channel.publish(session_id, ChatEvent.BOT_MESSAGE, reply)
        else:
            reply = _bot_turn(result)
            if not streaming:
                self.channel.publish(session_id, ChatEvent.BOT_MESSAGE, reply)
        finally:
            self.channel.publish(session_id, ChatEvent.BOT_TYPING, {"typing": False})
        return reply


def _turn(role: str, content: str, **extra: Any) -> dict[str, Any]:
    return {
        "id": str(uuid.uuid4()),
        "role": role,
        "content": content,
        "timestamp": datetime.now(UTC).isoformat(),
        **extra,
    }


def _bot_turn(result: QueryResult) -> dict[str, Any]:
    return _turn(
        "assistant",
        result.response,
        sources=[asdict(c) for c in result.citations],
        metadata={
            **asdict(result.metrics),
            "model": result.model,
        },
    )
