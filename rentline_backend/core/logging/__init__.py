"""Logging infrastructure for RentLine backend."""

from .audit import log_event
from .context import (
    RequestIdMiddleware,
    TransactionIdFilter,
    get_actor_id,
    get_transaction_id,
    set_actor_id,
    set_transaction_id,
)
from .formatter import StructuredFormatter
from .logger_config import get_logger, setup_logging, shutdown_logging

__all__ = [
    "log_event",
    "RequestIdMiddleware",
    "TransactionIdFilter",
    "get_actor_id",
    "get_transaction_id",
    "set_actor_id",
    "set_transaction_id",
    "StructuredFormatter",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
]
