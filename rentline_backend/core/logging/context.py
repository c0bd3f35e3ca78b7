"""
Request correlation for logging.
Carries a transaction ID and the acting profile ID through the request context.
"""

import logging
import uuid
from collections.abc import Callable
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

_transaction_id: ContextVar[str | None] = ContextVar("transaction_id", default=None)
_actor_id: ContextVar[int | None] = ContextVar("actor_id", default=None)


def generate_transaction_id() -> str:
    """Generate a short transaction ID for request tracking."""
    return str(uuid.uuid4())[:8]


def get_transaction_id() -> str:
    """Get the current transaction ID or generate a new one."""
    txn_id = _transaction_id.get()
    if txn_id is None:
        txn_id = generate_transaction_id()
        _transaction_id.set(txn_id)
    return txn_id


def set_transaction_id(txn_id: str) -> None:
    """Set the transaction ID for the current context."""
    _transaction_id.set(txn_id)


def get_actor_id() -> int | None:
    """Profile ID of the authenticated caller, if any."""
    return _actor_id.get()


def set_actor_id(actor_id: int | None) -> None:
    """Bind the authenticated caller to the current context."""
    _actor_id.set(actor_id)


class TransactionIdFilter(logging.Filter):
    """Logging filter that stamps transaction and actor IDs on records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "transaction_id", None):
            record.transaction_id = get_transaction_id()
        if not hasattr(record, "actor_id"):
            record.actor_id = get_actor_id()
        return True


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Sets the transaction ID for each request and echoes it in the response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        txn_id = request.headers.get("x-transaction-id") or generate_transaction_id()
        set_transaction_id(txn_id)
        set_actor_id(None)

        response = await call_next(request)
        response.headers["x-transaction-id"] = txn_id
        return response
