"""Tenancy management models for RentLine.

A JoinRequest is a tenant's application to occupy a unit of a property;
approving one creates exactly one Tenancy and records it on the request.
"""

import enum
from datetime import date
from decimal import Decimal

from sqlalchemy import (
    Date,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ...database import Base, Identified, TimestampMixin


class TenancyStatus(str, enum.Enum):
    """Tenancy status values."""

    ACTIVE = "active"
    ENDED = "ended"


class JoinRequestStatus(str, enum.Enum):
    """Join request status values."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


def _values(enum_cls):
    return [m.value for m in enum_cls]


class Tenancy(Identified, TimestampMixin, Base):
    """A lease linking a tenant to a unit."""

    __tablename__ = "tenancies"

    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False
    )
    rent_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[TenancyStatus] = mapped_column(
        Enum(TenancyStatus, values_callable=_values),
        nullable=False,
        default=TenancyStatus.ACTIVE,
    )

    # Relationships
    tenant = relationship("Profile")
    unit = relationship("Unit")

    __table_args__ = (
        Index("ix_tenancies_tenant", "tenant_id"),
        Index("ix_tenancies_unit_status", "unit_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Tenancy(id={self.id}, unit_id={self.unit_id}, status={self.status})>"


class JoinRequest(Identified, TimestampMixin, Base):
    """A tenant's request to join a property, optionally naming a unit."""

    __tablename__ = "join_requests"

    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    # NULL means any available unit
    unit_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[JoinRequestStatus] = mapped_column(
        Enum(JoinRequestStatus, values_callable=_values),
        nullable=False,
        default=JoinRequestStatus.PENDING,
    )
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    tenancy_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("tenancies.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships
    tenant = relationship("Profile")
    property = relationship("Property")
    unit = relationship("Unit")

    __table_args__ = (
        Index("ix_join_requests_tenant", "tenant_id"),
        Index("ix_join_requests_property_status", "property_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<JoinRequest(id={self.id}, property_id={self.property_id}, status={self.status})>"
