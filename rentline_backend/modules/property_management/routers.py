"""Property management API routes."""

from fastapi import APIRouter, Query

from ...database import DB
from ..auth.dependencies import CurrentUser, LandlordOrAdminUser, LandlordUser
from ..commons import BaseResponse, PaginatedResponse, Pagination
from . import services
from .models import UnitStatus
from .schemas import (
    ExpenseCreate,
    ExpenseResponse,
    PropertyCreate,
    PropertyResponse,
    PropertySearchResult,
    PropertyUpdate,
    PropertyWithUnitsResponse,
    UnitCreate,
    UnitResponse,
    UnitUpdate,
    VisibilityUpdate,
)

router = APIRouter(prefix="/properties", tags=["Properties"])
units_router = APIRouter(prefix="/units", tags=["Units"])
expenses_router = APIRouter(prefix="/expenses", tags=["Expenses"])


# ----- Properties -----


@router.get("/search", response_model=BaseResponse[list[PropertySearchResult]])
async def search_properties(
    current_user: CurrentUser,
    db: DB,
    q: str = Query("", max_length=255, description="Name, address or city"),
):
    """Search published properties with their vacant units."""
    results = await services.search_properties(db, q)
    return BaseResponse(success=True, data=results)


@router.get("", response_model=BaseResponse[PaginatedResponse[PropertyResponse]])
async def list_properties(
    current_user: LandlordOrAdminUser,
    db: DB,
    pagination: Pagination,
    search: str | None = Query(None),
):
    """Get properties with pagination and filtering."""
    properties, total = await services.list_properties(
        db,
        current_user,
        skip=pagination.offset,
        limit=pagination.page_size,
        search=search,
    )

    return BaseResponse(
        success=True,
        data=PaginatedResponse.from_items(
            items=[PropertyResponse.model_validate(p) for p in properties],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        ),
    )


@router.get("/{property_id}", response_model=BaseResponse[PropertyWithUnitsResponse])
async def get_property(property_id: int, current_user: CurrentUser, db: DB):
    """Get a property by ID with its units."""
    property_obj = await services.get_property(db, current_user, property_id)
    return BaseResponse(
        success=True,
        data=PropertyWithUnitsResponse.model_validate(property_obj),
    )


@router.post("", response_model=BaseResponse[PropertyResponse], status_code=201)
async def create_property(data: PropertyCreate, current_user: LandlordUser, db: DB):
    """Create a new property."""
    property_obj = await services.create_property(db, current_user, data)
    return BaseResponse(
        success=True,
        message="Property created successfully",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.put("/{property_id}", response_model=BaseResponse[PropertyResponse])
async def update_property(
    property_id: int, data: PropertyUpdate, current_user: LandlordOrAdminUser, db: DB
):
    """Update a property."""
    property_obj = await services.update_property(db, current_user, property_id, data)
    return BaseResponse(
        success=True,
        message="Property updated successfully",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.put("/{property_id}/visibility", response_model=BaseResponse[PropertyResponse])
async def set_property_visibility(
    property_id: int, data: VisibilityUpdate, current_user: LandlordOrAdminUser, db: DB
):
    """Publish a property to tenant search or hide it."""
    property_obj = await services.set_visibility(
        db, current_user, property_id, data.is_searchable
    )
    state = "visible in" if data.is_searchable else "hidden from"
    return BaseResponse(
        success=True,
        message=f"Property is now {state} search",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.delete("/{property_id}", response_model=BaseResponse[None])
async def delete_property(property_id: int, current_user: LandlordOrAdminUser, db: DB):
    """Delete a property and all its units."""
    await services.delete_property(db, current_user, property_id)
    return BaseResponse(success=True, message="Property deleted successfully")


# ----- Units -----


@router.post(
    "/{property_id}/units", response_model=BaseResponse[UnitResponse], status_code=201
)
async def create_unit(
    property_id: int, data: UnitCreate, current_user: LandlordOrAdminUser, db: DB
):
    """Create a unit under a property."""
    unit = await services.create_unit(db, current_user, property_id, data)
    return BaseResponse(
        success=True,
        message="Unit created successfully",
        data=UnitResponse.model_validate(unit),
    )


@units_router.get("", response_model=BaseResponse[PaginatedResponse[UnitResponse]])
async def list_units(
    current_user: LandlordOrAdminUser,
    db: DB,
    pagination: Pagination,
    property_id: int | None = Query(None),
    status: UnitStatus | None = Query(None),
):
    """Get units with pagination and filtering."""
    units, total = await services.list_units(
        db,
        current_user,
        property_id=property_id,
        status=status,
        skip=pagination.offset,
        limit=pagination.page_size,
    )
    return BaseResponse(
        success=True,
        data=PaginatedResponse.from_items(
            items=[UnitResponse.model_validate(u) for u in units],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        ),
    )


@units_router.get("/{unit_id}", response_model=BaseResponse[UnitResponse])
async def get_unit(unit_id: int, current_user: LandlordOrAdminUser, db: DB):
    """Get a unit by ID."""
    unit = await services.get_unit(db, current_user, unit_id)
    return BaseResponse(success=True, data=UnitResponse.model_validate(unit))


@units_router.put("/{unit_id}", response_model=BaseResponse[UnitResponse])
async def update_unit(
    unit_id: int, data: UnitUpdate, current_user: LandlordOrAdminUser, db: DB
):
    """Update a unit."""
    unit = await services.update_unit(db, current_user, unit_id, data)
    return BaseResponse(
        success=True,
        message="Unit updated successfully",
        data=UnitResponse.model_validate(unit),
    )


@units_router.delete("/{unit_id}", response_model=BaseResponse[None])
async def delete_unit(unit_id: int, current_user: LandlordOrAdminUser, db: DB):
    """Delete a unit."""
    await services.delete_unit(db, current_user, unit_id)
    return BaseResponse(success=True, message="Unit deleted successfully")


# ----- Expenses -----


@router.post(
    "/{property_id}/expenses",
    response_model=BaseResponse[ExpenseResponse],
    status_code=201,
)
async def record_expense(
    property_id: int, data: ExpenseCreate, current_user: LandlordOrAdminUser, db: DB
):
    """Record an expense against a property."""
    expense = await services.record_expense(db, current_user, property_id, data)
    return BaseResponse(
        success=True,
        message="Expense recorded successfully",
        data=ExpenseResponse.model_validate(expense),
    )


@router.get(
    "/{property_id}/expenses",
    response_model=BaseResponse[PaginatedResponse[ExpenseResponse]],
)
async def list_expenses(
    property_id: int, current_user: LandlordOrAdminUser, db: DB, pagination: Pagination
):
    """Get the expenses of a property."""
    expenses, total = await services.list_expenses(
        db,
        current_user,
        property_id,
        skip=pagination.offset,
        limit=pagination.page_size,
    )
    return BaseResponse(
        success=True,
        data=PaginatedResponse.from_items(
            items=[ExpenseResponse.model_validate(e) for e in expenses],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        ),
    )


@expenses_router.delete("/{expense_id}", response_model=BaseResponse[None])
async def delete_expense(expense_id: int, current_user: LandlordOrAdminUser, db: DB):
    """Delete an expense."""
    await services.delete_expense(db, current_user, expense_id)
    return BaseResponse(success=True, message="Expense deleted successfully")
