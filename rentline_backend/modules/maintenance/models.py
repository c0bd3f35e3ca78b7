"""Maintenance request models for RentLine."""

import enum

from sqlalchemy import Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ...database import Base, Identified, TimestampMixin


class MaintenanceUrgency(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EMERGENCY = "emergency"


class MaintenanceStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _values(enum_cls):
    return [m.value for m in enum_cls]


class MaintenanceRequest(Identified, TimestampMixin, Base):
    """A tenant's report of a problem with their unit."""

    __tablename__ = "maintenance_requests"

    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(60), nullable=False)
    urgency: Mapped[MaintenanceUrgency] = mapped_column(
        Enum(MaintenanceUrgency, values_callable=_values),
        nullable=False,
        default=MaintenanceUrgency.MEDIUM,
    )
    status: Mapped[MaintenanceStatus] = mapped_column(
        Enum(MaintenanceStatus, values_callable=_values),
        nullable=False,
        default=MaintenanceStatus.PENDING,
    )

    # Relationships
    tenant = relationship("Profile")
    unit = relationship("Unit")

    __table_args__ = (
        Index("ix_maintenance_tenant", "tenant_id"),
        Index("ix_maintenance_unit_status", "unit_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<MaintenanceRequest(id={self.id}, unit_id={self.unit_id}, status={self.status})>"
