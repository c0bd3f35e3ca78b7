"""Payment models for RentLine.

- Rent payments recorded against a tenancy
- Payout requests by which landlords withdraw collected rent
"""

import enum
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ...database import Base, Identified, TimestampMixin


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMethod(str, enum.Enum):
    MOMO = "momo"
    CARD = "card"
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"


class PayoutStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


def _values(enum_cls):
    return [m.value for m in enum_cls]


class Payment(Identified, TimestampMixin, Base):
    """A rent payment on a tenancy."""

    __tablename__ = "payments"

    tenancy_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tenancies.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, values_callable=_values),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod, values_callable=_values), nullable=False
    )
    reference: Mapped[str | None] = mapped_column(String(120), nullable=True)

    # Relationships
    tenancy = relationship("Tenancy")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        Index("ix_payments_tenancy_date", "tenancy_id", "payment_date"),
        Index("ix_payments_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, tenancy_id={self.tenancy_id}, status={self.status})>"


class PayoutRequest(Identified, TimestampMixin, Base):
    """A landlord's request to withdraw collected rent."""

    __tablename__ = "payout_requests"

    landlord_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[PayoutStatus] = mapped_column(
        Enum(PayoutStatus, values_callable=_values),
        nullable=False,
        default=PayoutStatus.PENDING,
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    transaction_id: Mapped[str | None] = mapped_column(String(120), nullable=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payouts_amount_positive"),
        Index("ix_payout_requests_landlord", "landlord_id"),
    )

    def __repr__(self) -> str:
        return f"<PayoutRequest(id={self.id}, amount={self.amount}, status={self.status})>"
