"""Property management models for RentLine.

- Properties owned by a landlord, hidden from tenant search until published
- Units with rent and occupancy status
- Expenses recorded against a property
"""

import enum
from datetime import date
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
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


class UnitStatus(str, enum.Enum):
    """Unit status values."""

    VACANT = "vacant"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class Property(Identified, TimestampMixin, Base):
    """A building or complex owned by a landlord."""

    __tablename__ = "properties"

    landlord_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    country: Mapped[str | None] = mapped_column(String(120), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_searchable: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Relationships
    units: Mapped[list["Unit"]] = relationship(
        "Unit",
        back_populates="property",
        cascade="all, delete-orphan",
        order_by="Unit.unit_number",
    )

    __table_args__ = (
        Index("ix_properties_landlord", "landlord_id"),
        Index("ix_properties_searchable", "is_searchable"),
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, name={self.name})>"


class Unit(Identified, TimestampMixin, Base):
    """A rentable unit within a property."""

    __tablename__ = "units"

    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    unit_number: Mapped[str] = mapped_column(String(50), nullable=False)
    bedrooms: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    bathrooms: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    rent_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[UnitStatus] = mapped_column(
        Enum(UnitStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UnitStatus.VACANT,
    )

    # Relationships
    property: Mapped["Property"] = relationship("Property", back_populates="units")

    __table_args__ = (
        CheckConstraint("rent_amount > 0", name="ck_units_rent_positive"),
        Index("ix_units_number", "property_id", "unit_number", unique=True),
        Index("ix_units_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Unit(id={self.id}, number={self.unit_number}, status={self.status})>"


class Expense(Identified, TimestampMixin, Base):
    """An expense recorded against a property."""

    __tablename__ = "expenses"

    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (Index("ix_expenses_property", "property_id"),)

    def __repr__(self) -> str:
        return f"<Expense(id={self.id}, property_id={self.property_id}, amount={self.amount})>"
