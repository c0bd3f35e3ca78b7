"""CRUD operations for property management module.

Listing functions take ``landlord_id``: a landlord passes their own id,
admins pass None to see every row.
"""

from sqlalchemy import and_, func, or_, select, true, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ...core.base_crud import BaseCRUD
from ..tenancy_management.models import Tenancy, TenancyStatus
from .models import Expense, Property, Unit, UnitStatus

# ----- Property CRUD -----


async def get_property_by_id(
    db: AsyncSession,
    property_id: int,
    include_units: bool = False,
) -> Property | None:
    """Get a property by ID."""
    query = select(Property).where(Property.id == property_id)
    if include_units:
        query = query.options(selectinload(Property.units))
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_properties(
    db: AsyncSession,
    landlord_id: int | None = None,
    skip: int = 0,
    limit: int = 100,
    search: str | None = None,
    is_searchable: bool | None = None,
) -> tuple[list[Property], int]:
    """Get properties with filtering and pagination.

    Returns:
        Tuple of (list of properties, total count)
    """
    filters = []
    if landlord_id is not None:
        filters.append(Property.landlord_id == landlord_id)
    if is_searchable is not None:
        filters.append(Property.is_searchable == is_searchable)
    if search:
        search_filter = f"%{search}%"
        filters.append(
            or_(
                Property.name.ilike(search_filter),
                Property.address.ilike(search_filter),
                Property.city.ilike(search_filter),
            )
        )

    count_query = select(func.count(Property.id)).where(and_(true(), *filters))
    total = (await db.execute(count_query)).scalar_one()

    data_query = (
        select(Property)
        .where(and_(true(), *filters))
        .order_by(Property.created_at.desc(), Property.id.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(data_query)
    return list(result.scalars().all()), total


async def get_landlord_property_ids(db: AsyncSession, landlord_id: int) -> list[int]:
    """IDs of every property owned by a landlord."""
    result = await db.execute(
        select(Property.id).where(Property.landlord_id == landlord_id)
    )
    return list(result.scalars().all())


async def create_property(db: AsyncSession, landlord_id: int, **kwargs) -> Property:
    """Create a new property."""
    property_obj = Property(landlord_id=landlord_id, **kwargs)
    db.add(property_obj)
    await db.flush()
    return property_obj


async def update_property(db: AsyncSession, property_obj: Property, **kwargs) -> Property:
    """Update a property."""
    for key, value in kwargs.items():
        if hasattr(property_obj, key):
            setattr(property_obj, key, value)
    await db.flush()
    return property_obj


async def delete_property(db: AsyncSession, property_obj: Property) -> None:
    """Permanently delete a property (cascades to units and expenses)."""
    await db.delete(property_obj)
    await db.flush()


async def search_properties(db: AsyncSession, term: str) -> list[Property]:
    """Searchable properties whose name, address or city contains the term."""
    pattern = f"%{term}%"
    result = await db.execute(
        select(Property)
        .options(selectinload(Property.units))
        .where(
            and_(
                Property.is_searchable.is_(True),
                or_(
                    Property.name.ilike(pattern),
                    Property.address.ilike(pattern),
                    Property.city.ilike(pattern),
                ),
            )
        )
        .order_by(Property.name, Property.id)
    )
    return list(result.scalars().all())


# ----- Unit CRUD -----


async def get_unit_by_id(db: AsyncSession, unit_id: int) -> Unit | None:
    """Get a unit by ID with its property loaded."""
    result = await db.execute(
        select(Unit).options(selectinload(Unit.property)).where(Unit.id == unit_id)
    )
    return result.scalar_one_or_none()


async def lock_unit(db: AsyncSession, unit_id: int) -> Unit | None:
    """Load a unit with its row locked until the transaction ends."""
    result = await db.execute(
        select(Unit)
        .options(selectinload(Unit.property))
        .where(Unit.id == unit_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_unit_by_number(
    db: AsyncSession, property_id: int, unit_number: str
) -> Unit | None:
    """Get a unit by its number within a property."""
    result = await db.execute(
        select(Unit).where(
            and_(Unit.property_id == property_id, Unit.unit_number == unit_number)
        )
    )
    return result.scalar_one_or_none()


async def get_units(
    db: AsyncSession,
    landlord_id: int | None = None,
    property_id: int | None = None,
    status: UnitStatus | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[Unit], int]:
    """Get units with filtering and pagination.

    Returns:
        Tuple of (list of units, total count)
    """
    filters = []
    if landlord_id is not None:
        filters.append(Property.landlord_id == landlord_id)
    if property_id is not None:
        filters.append(Unit.property_id == property_id)
    if status is not None:
        filters.append(Unit.status == status)

    count_query = (
        select(func.count(Unit.id))
        .join(Property, Unit.property_id == Property.id)
        .where(and_(true(), *filters))
    )
    total = (await db.execute(count_query)).scalar_one()

    data_query = (
        select(Unit)
        .join(Property, Unit.property_id == Property.id)
        .where(and_(true(), *filters))
        .order_by(Unit.property_id, Unit.unit_number)
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(data_query)
    return list(result.scalars().all()), total


async def create_unit(db: AsyncSession, property_id: int, **kwargs) -> Unit:
    """Create a new unit."""
    unit = Unit(property_id=property_id, **kwargs)
    db.add(unit)
    await db.flush()
    return unit


async def update_unit(db: AsyncSession, unit: Unit, **kwargs) -> Unit:
    """Update a unit."""
    for key, value in kwargs.items():
        if value is not None and hasattr(unit, key):
            setattr(unit, key, value)
    await db.flush()
    return unit


async def set_unit_status(db: AsyncSession, unit: Unit, status: UnitStatus) -> Unit:
    """Set a unit's occupancy status."""
    unit.status = status
    await db.flush()
    return unit


async def claim_vacant_unit(db: AsyncSession, unit: Unit) -> bool:
    """Mark a vacant unit occupied.

    The status check is part of the UPDATE, so of two writers racing for the
    same unit only one matches a row. Returns False for the loser.
    """
    result = await db.execute(
        update(Unit)
        .where(and_(Unit.id == unit.id, Unit.status == UnitStatus.VACANT))
        .values(status=UnitStatus.OCCUPIED)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return False
    await db.refresh(unit, ["status", "updated_at"])
    return True


async def delete_unit(db: AsyncSession, unit: Unit) -> None:
    """Permanently delete a unit."""
    await db.delete(unit)
    await db.flush()


async def count_active_tenancies(
    db: AsyncSession,
    unit_id: int | None = None,
    property_id: int | None = None,
) -> int:
    """Count active tenancies on a unit, or on any unit of a property."""
    query = select(func.count(Tenancy.id)).where(
        Tenancy.status == TenancyStatus.ACTIVE
    )
    if unit_id is not None:
        query = query.where(Tenancy.unit_id == unit_id)
    if property_id is not None:
        query = query.join(Unit, Tenancy.unit_id == Unit.id).where(
            Unit.property_id == property_id
        )
    result = await db.execute(query)
    return result.scalar_one()


# ----- Expense CRUD -----


class ExpenseCRUD(BaseCRUD[Expense]):
    """Expense records, newest expense date first."""

    default_order_by = "expense_date"


expense_crud = ExpenseCRUD(Expense)
