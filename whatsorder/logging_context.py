"""Correlation ID logging context for tracing one inbound message.

Provides a message_id-aware logger that attaches a correlation ID to every
log record, so the gate decision, the resolved intent and the store writes
for a single WhatsApp message can be read together.

Usage:
    from whatsorder.logging_context import get_message_logger, set_message_id

    set_message_id("MSG-abc123")
    logger = get_message_logger(__name__)
    logger.info("Resolving intent")  # record.message_id == "MSG-abc123"
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Optional

_message_id: ContextVar[str] = ContextVar("message_id", default="NO_MESSAGE_ID")


def new_message_id() -> str:
    """Generate a short correlation ID for an inbound message."""
    return f"MSG-{uuid.uuid4().hex[:8]}"


def set_message_id(message_id: Optional[str] = None) -> str:
    """Set the correlation ID for the current context and return it."""
    value = message_id or new_message_id()
    _message_id.set(value)
    return value


def get_message_id() -> str:
    """Retrieve the current correlation ID."""
    return _message_id.get()


class MessageIdFilter(logging.Filter):
    """Injects message_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.message_id = _message_id.get()  # type: ignore[attr-defined]
        return True


def get_message_logger(name: str) -> logging.Logger:
    """Return a logger with the MessageIdFilter attached.

    The filter adds ``message_id`` to each record so formatters can
    include ``%(message_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, MessageIdFilter) for f in logger.filters):
        logger.addFilter(MessageIdFilter())
    return logger
