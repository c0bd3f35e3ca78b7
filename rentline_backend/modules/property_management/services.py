"""Property management business logic services."""

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.access import ensure_owner, is_admin, is_tenant
from ...core.events import ChangeType, publish_change
from ...core.exceptions import (
    BusinessLogicError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    ValidationError,
)
from ...core.logging import get_logger, log_event
from ...core.utils import sanitize_string, today
from ..auth.schemas import AuthenticatedUser
from . import crud
from .models import Expense, Property, Unit, UnitStatus
from .schemas import (
    ExpenseCreate,
    PropertyCreate,
    PropertySearchResult,
    PropertyUpdate,
    UnitCreate,
    UnitResponse,
    UnitUpdate,
)

logger = get_logger(__name__)


def _scope(actor: AuthenticatedUser) -> int | None:
    """Landlord filter for list queries: None for admins."""
    return None if is_admin(actor) else actor.id


async def get_owned_property(
    db: AsyncSession,
    actor: AuthenticatedUser,
    property_id: int,
    action: str = "manage",
    include_units: bool = False,
) -> Property:
    """Load a property the actor owns (or any property for admins).

    Raises:
        ResourceNotFoundError: If property not found
        PermissionError: If the actor does not own the property
    """
    property_obj = await crud.get_property_by_id(db, property_id, include_units)
    if not property_obj:
        raise ResourceNotFoundError("Property", property_id)
    ensure_owner(actor, property_obj.landlord_id, action, "property")
    return property_obj


async def get_owned_unit(
    db: AsyncSession, actor: AuthenticatedUser, unit_id: int, action: str = "manage"
) -> Unit:
    """Load a unit on a property the actor owns."""
    unit = await crud.get_unit_by_id(db, unit_id)
    if not unit:
        raise ResourceNotFoundError("Unit", unit_id)
    ensure_owner(actor, unit.property.landlord_id, action, "unit")
    return unit


# ----- Properties -----


async def create_property(
    db: AsyncSession, actor: AuthenticatedUser, data: PropertyCreate
) -> Property:
    """Create a property owned by the calling landlord."""
    property_obj = await crud.create_property(
        db,
        landlord_id=actor.id,
        name=data.name.strip(),
        address=data.address.strip(),
        city=sanitize_string(data.city, 120),
        country=sanitize_string(data.country, 120),
        description=sanitize_string(data.description, 5000),
        is_searchable=data.is_searchable,
    )
    await db.commit()

    publish_change("properties", ChangeType.INSERT, property_obj.id, [actor.id])
    return property_obj


async def list_properties(
    db: AsyncSession,
    actor: AuthenticatedUser,
    skip: int = 0,
    limit: int = 100,
    search: str | None = None,
) -> tuple[list[Property], int]:
    """Landlords see their own properties, admins see all."""
    return await crud.get_properties(
        db, landlord_id=_scope(actor), skip=skip, limit=limit, search=search
    )


async def get_property(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int
) -> Property:
    """Get a property with its units.

    Tenants may read searchable properties; otherwise ownership is required.
    """
    property_obj = await crud.get_property_by_id(db, property_id, include_units=True)
    if not property_obj:
        raise ResourceNotFoundError("Property", property_id)
    if is_tenant(actor) and property_obj.is_searchable:
        return property_obj
    ensure_owner(actor, property_obj.landlord_id, "view", "property")
    return property_obj


async def update_property(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int, data: PropertyUpdate
) -> Property:
    """Update a property."""
    property_obj = await get_owned_property(db, actor, property_id, "update")

    updates = data.model_dump(exclude_unset=True)
    for key in ("name", "address"):
        if key in updates:
            if updates[key] is None:
                raise ValidationError("must not be empty", field=key)
            updates[key] = updates[key].strip()
    for key in ("city", "country"):
        if key in updates:
            updates[key] = sanitize_string(updates[key], 120)
    if "description" in updates:
        updates["description"] = sanitize_string(updates["description"], 5000)

    await crud.update_property(db, property_obj, **updates)
    await db.commit()

    publish_change(
        "properties", ChangeType.UPDATE, property_obj.id, [property_obj.landlord_id]
    )
    return property_obj


async def set_visibility(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int, is_searchable: bool
) -> Property:
    """Publish a property to tenant search or hide it."""
    property_obj = await get_owned_property(db, actor, property_id, "publish")
    await crud.update_property(db, property_obj, is_searchable=is_searchable)
    await db.commit()

    log_event(
        logger,
        "property_visibility_changed",
        property_id=property_obj.id,
        is_searchable=is_searchable,
    )
    publish_change(
        "properties", ChangeType.UPDATE, property_obj.id, [property_obj.landlord_id]
    )
    return property_obj


async def delete_property(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int
) -> None:
    """Delete a property and its units.

    Raises:
        BusinessLogicError: If any unit has an active tenancy
    """
    property_obj = await get_owned_property(db, actor, property_id, "delete")

    if await crud.count_active_tenancies(db, property_id=property_id):
        raise BusinessLogicError(
            "Cannot delete a property while any of its units has an active tenancy"
        )

    landlord_id = property_obj.landlord_id
    await crud.delete_property(db, property_obj)
    await db.commit()

    log_event(logger, "property_deleted", property_id=property_id)
    publish_change("properties", ChangeType.DELETE, property_id, [landlord_id])


# ----- Units -----


async def create_unit(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int, data: UnitCreate
) -> Unit:
    """Create a unit under an owned property.

    Raises:
        ValidationError: If the unit is created as occupied
        ResourceAlreadyExistsError: If the unit number is taken in the property
    """
    property_obj = await get_owned_property(db, actor, property_id, "add units to")

    if data.status == UnitStatus.OCCUPIED:
        raise ValidationError(
            "Units become occupied only through a tenancy", field="status"
        )

    unit_number = data.unit_number.strip()
    if await crud.get_unit_by_number(db, property_id, unit_number):
        raise ResourceAlreadyExistsError("Unit", unit_number)

    unit = await crud.create_unit(
        db,
        property_id=property_obj.id,
        unit_number=unit_number,
        bedrooms=data.bedrooms,
        bathrooms=data.bathrooms,
        rent_amount=data.rent_amount,
        status=data.status,
    )
    await db.commit()

    publish_change("units", ChangeType.INSERT, unit.id, [property_obj.landlord_id])
    return unit


async def list_units(
    db: AsyncSession,
    actor: AuthenticatedUser,
    property_id: int | None = None,
    status: UnitStatus | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[Unit], int]:
    """List units of the caller's properties, optionally for one property."""
    if property_id is not None:
        await get_owned_property(db, actor, property_id, "view units of")
    return await crud.get_units(
        db,
        landlord_id=_scope(actor),
        property_id=property_id,
        status=status,
        skip=skip,
        limit=limit,
    )


async def get_unit(db: AsyncSession, actor: AuthenticatedUser, unit_id: int) -> Unit:
    return await get_owned_unit(db, actor, unit_id, "view")


async def update_unit(
    db: AsyncSession, actor: AuthenticatedUser, unit_id: int, data: UnitUpdate
) -> Unit:
    """Update a unit.

    Occupancy follows tenancies: a unit cannot be marked occupied by hand,
    and a unit with an active tenancy cannot be moved to another status.
    """
    unit = await get_owned_unit(db, actor, unit_id, "update")
    updates = data.model_dump(exclude_unset=True)

    new_status = updates.get("status")
    if new_status is not None and new_status != unit.status:
        if new_status == UnitStatus.OCCUPIED:
            raise ValidationError(
                "Units become occupied only through a tenancy", field="status"
            )
        if await crud.count_active_tenancies(db, unit_id=unit.id):
            raise BusinessLogicError(
                "Unit has an active tenancy; end the tenancy to change its status"
            )

    unit_number = updates.get("unit_number")
    if unit_number is not None:
        unit_number = unit_number.strip()
        updates["unit_number"] = unit_number
        if unit_number != unit.unit_number:
            if await crud.get_unit_by_number(db, unit.property_id, unit_number):
                raise ResourceAlreadyExistsError("Unit", unit_number)

    await crud.update_unit(db, unit, **updates)
    await db.commit()

    publish_change("units", ChangeType.UPDATE, unit.id, [unit.property.landlord_id])
    return unit


async def delete_unit(db: AsyncSession, actor: AuthenticatedUser, unit_id: int) -> None:
    """Delete a unit.

    Raises:
        BusinessLogicError: If the unit is occupied
    """
    unit = await get_owned_unit(db, actor, unit_id, "delete")

    if unit.status == UnitStatus.OCCUPIED or await crud.count_active_tenancies(
        db, unit_id=unit.id
    ):
        raise BusinessLogicError("Cannot delete an occupied unit")

    landlord_id = unit.property.landlord_id
    await crud.delete_unit(db, unit)
    await db.commit()

    publish_change("units", ChangeType.DELETE, unit_id, [landlord_id])


# ----- Expenses -----


async def record_expense(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int, data: ExpenseCreate
) -> Expense:
    """Record an expense against an owned property."""
    property_obj = await get_owned_property(db, actor, property_id, "record expenses for")
    expense = await crud.expense_crud.create(
        db,
        property_id=property_obj.id,
        amount=data.amount,
        description=data.description.strip(),
        expense_date=data.expense_date or today(),
    )
    await db.commit()

    publish_change(
        "expenses", ChangeType.INSERT, expense.id, [property_obj.landlord_id]
    )
    return expense


async def list_expenses(
    db: AsyncSession,
    actor: AuthenticatedUser,
    property_id: int,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[Expense], int]:
    await get_owned_property(db, actor, property_id, "view expenses of")
    return await crud.expense_crud.get_multi(
        db, skip=skip, limit=limit, filters={"property_id": property_id}
    )


async def delete_expense(
    db: AsyncSession, actor: AuthenticatedUser, expense_id: int
) -> None:
    """Delete an expense of an owned property."""
    expense = await crud.expense_crud.get(db, expense_id)
    if not expense:
        raise ResourceNotFoundError("Expense", expense_id)
    property_obj = await get_owned_property(
        db, actor, expense.property_id, "delete expenses of"
    )

    await crud.expense_crud.delete(db, expense)
    await db.commit()

    publish_change("expenses", ChangeType.DELETE, expense_id, [property_obj.landlord_id])


# ----- Search -----


def _to_search_result(property_obj: Property) -> PropertySearchResult:
    vacant = [u for u in property_obj.units if u.status == UnitStatus.VACANT]
    rents = [float(u.rent_amount) for u in vacant]
    return PropertySearchResult(
        id=property_obj.id,
        name=property_obj.name,
        address=property_obj.address,
        city=property_obj.city,
        country=property_obj.country,
        description=property_obj.description,
        landlord_id=property_obj.landlord_id,
        vacant_units=[UnitResponse.model_validate(u) for u in vacant],
        vacant_unit_count=len(vacant),
        min_rent=min(rents) if rents else None,
        max_rent=max(rents) if rents else None,
    )


async def search_properties(db: AsyncSession, term: str | None) -> list[PropertySearchResult]:
    """Search published properties by name, address or city.

    An empty term returns no results.
    """
    term = (term or "").strip()
    if not term:
        return []

    properties = await crud.search_properties(db, term)
    return [_to_search_result(p) for p in properties]
