"""
Database configuration for RentLine.

Every domain table carries an integer primary key, an external UUID and
created/updated timestamps. Ownership scoping lives in the module CRUD
layers (see core.access), not in the session.
"""

import logging
from uuid import UUID, uuid4
from datetime import datetime
from typing import Annotated

from fastapi import Depends
from sqlalchemy import DateTime, Integer, event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Mapped, declarative_base, mapped_column
from sqlalchemy.sql import func

from .config import settings
from .core.database_types import UUID as UUID_DB
from .core.utils import utc_now

logger = logging.getLogger(__name__)

# Create async engine with SSL support for MySQL
connect_args = {}
if settings.database_url.startswith("mysql+asyncmy"):
    connect_args = {
        "ssl": {
            "ssl_check_hostname": settings.database_ssl_check_hostname,
            "ssl_verify_cert": settings.database_ssl_verify_cert,
            "ssl_verify_identity": settings.database_ssl_verify_identity,
        },
    }

engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    future=True,
    connect_args=connect_args,
    pool_pre_ping=True,
    pool_recycle=3600,
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

# Base class
Base = declarative_base()


class TimestampMixin:
    """Mixin to add created and updated timestamps to models."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
    )


class Identified:
    """Mixin for an auto-increment primary key plus an external UUID."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[UUID] = mapped_column(
        UUID_DB(), nullable=False, unique=True, default=uuid4
    )


@event.listens_for(Identified, "before_insert", propagate=True)
def set_uuid(mapper, connection, target):
    """Generate the external UUID before insert if it was not set."""
    if getattr(target, "uuid", None) is None:
        target.uuid = uuid4()


async def get_db() -> AsyncSession:
    """Dependency to get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


# Type alias for dependency injection
DB = Annotated[AsyncSession, Depends(get_db)]


def import_models() -> None:
    """Import every model module so Base.metadata is complete."""
    from .modules.auth import models as auth_models  # noqa: F401
    from .modules.maintenance import models as maintenance_models  # noqa: F401
    from .modules.payments import models as payment_models  # noqa: F401
    from .modules.property_management import models as property_models  # noqa: F401
    from .modules.tenancy_management import models as tenancy_models  # noqa: F401


async def init_db():
    """Initialize database tables."""
    import_models()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
