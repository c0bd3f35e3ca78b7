"""Domain event logging.

State changes (approvals, status transitions, payouts) are logged with a
stable ``event`` name and the identifiers involved, so they can be
searched in the structured log stream.
"""

import logging
from typing import Any


def log_event(logger: logging.Logger, event: str, **fields: Any) -> None:
    """Log a domain state change at INFO with its fields as extras."""
    logger.info(event, extra={"event": event, **fields})
