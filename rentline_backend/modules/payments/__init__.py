"""Payments module for RentLine."""

from .models import Payment, PaymentMethod, PaymentStatus, PayoutRequest, PayoutStatus

__all__ = [
    # Models
    "Payment",
    "PayoutRequest",
    # Enums
    "PaymentMethod",
    "PaymentStatus",
    "PayoutStatus",
]
