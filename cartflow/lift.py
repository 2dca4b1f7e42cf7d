"""
Lift — helpers for lifting remote calls into Result-returning computations.

Re-exports from combinators.lift with cartflow-specific additions:
every network edge (offer lookup, settings refresh, address CRUD, order
submission) goes through `remote()` so a failure arrives as a
`TransportError` value instead of an exception.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from kungfu import LazyCoroResult, Result

# Re-export everything from combinators.lift
from combinators.lift import (
    pure,
    fail,
    catching_async,
    wrap_async,
    lifted,
    call,
    call_catching,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Transport Errors
# ═══════════════════════════════════════════════════════════════════════════════


class RemoteFailure(Exception):
    """
    Raised by transport adapters for a non-2xx response.

    `body` is whatever the server sent back; `extract_message` digs the
    human-readable part out of it.
    """

    def __init__(self, status: int, body: Any = None) -> None:
        super().__init__(f"HTTP {status}")
        self.status = status
        self.body = body


@dataclass(frozen=True, slots=True)
class TransportError:
    """Network failure, non-2xx response or malformed payload."""

    operation: str
    message: str
    status: int | None = None
    cause: Exception | None = None


_MESSAGE_FIELDS = ("message", "error", "detail", "msg")


def extract_message(body: Any, default: str = "Request failed") -> str:
    """
    Best-effort message extraction from a response body.

        extract_message({"message": "Invalid offer code"})  # "Invalid offer code"
        extract_message('{"error": "closed"}')              # "closed"
        extract_message(b"")                                # default
    """
    if body is None:
        return default
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        text = body.strip()
        if not text:
            return default
        try:
            parsed = json.loads(text)
        except ValueError:
            return text
        return extract_message(parsed, default) if not isinstance(parsed, str) else parsed
    if isinstance(body, Mapping):
        for name in _MESSAGE_FIELDS:
            value = body.get(name)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, Mapping):
                return extract_message(value, default)
        return default
    return default


def to_transport_error(operation: str, exc: Exception) -> TransportError:
    """Map any exception raised at a network edge to a TransportError."""
    if isinstance(exc, RemoteFailure):
        message = extract_message(exc.body, f"{operation} failed (HTTP {exc.status})")
        logger.warning("%s failed: HTTP %s %s", operation, exc.status, message)
        return TransportError(operation, message, status=exc.status, cause=exc)
    message = str(exc) or type(exc).__name__
    logger.warning("%s failed: %s", operation, message)
    return TransportError(operation, message, cause=exc)


# ═══════════════════════════════════════════════════════════════════════════════
# Cartflow-specific helpers
# ═══════════════════════════════════════════════════════════════════════════════


def remote[T](
    operation: str,
    fn: Callable[[], Awaitable[T]],
) -> LazyCoroResult[T, TransportError]:
    """
    Lift a collaborator call into LazyCoroResult.

    Example:
        offer = await remote("offer lookup", lambda: catalog.offer_by_code(code))
    """
    return catching_async(fn, on_error=lambda e: to_transport_error(operation, e))


def from_result[T, E](result: Result[T, E]) -> LazyCoroResult[T, E]:
    """Lift a Result into LazyCoroResult."""
    async def _run() -> Result[T, E]:
        return result
    return LazyCoroResult(_run)


__all__ = (
    # From combinators.lift
    "pure",
    "fail",
    "catching_async",
    "wrap_async",
    "lifted",
    "call",
    "call_catching",
    # Cartflow additions
    "RemoteFailure",
    "TransportError",
    "extract_message",
    "to_transport_error",
    "remote",
    "from_result",
)
