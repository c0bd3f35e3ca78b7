"""RentLine API application.

Run locally with:
    CONFIG=resources/config/local.yaml uvicorn rentline_backend.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .core.exceptions import RentLineException
from .core.logging import (
    RequestIdMiddleware,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from .modules.auth import router as auth_router
from .modules.change_feed.routers import router as change_feed_router
from .modules.dashboards.routers import router as dashboards_router
from .modules.maintenance.routers import router as maintenance_router
from .modules.payments.routers import payouts_router
from .modules.payments.routers import router as payments_router
from .modules.property_management import expenses_router, units_router
from .modules.property_management import router as properties_router
from .modules.tenancy_management.routers import join_requests_router
from .modules.tenancy_management.routers import router as tenancies_router

logger = get_logger(__name__)

ROUTERS = (
    auth_router,
    properties_router,
    units_router,
    expenses_router,
    join_requests_router,
    tenancies_router,
    payments_router,
    payouts_router,
    maintenance_router,
    dashboards_router,
    change_feed_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(
        "RentLine API starting",
        extra={"env": settings.app_env, "debug": settings.app_debug},
    )
    yield
    logger.info("RentLine API stopping")
    shutdown_logging()


def _docs_url(path: str) -> str | None:
    # API docs are only served in debug mode
    return f"{settings.api_prefix}{path}" if settings.app_debug else None


app = FastAPI(
    title=settings.api_title,
    description="Rental management for landlords, tenants and administrators",
    version=settings.api_version,
    docs_url=_docs_url("/docs"),
    redoc_url=_docs_url("/redoc"),
    openapi_url=_docs_url("/openapi.json"),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)


@app.exception_handler(RentLineException)
async def rentline_exception_handler(request: Request, exc: RentLineException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    detail = str(exc) if settings.app_debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "error": detail,
            "data": None,
        },
    )


@app.get(f"{settings.api_prefix}/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "version": settings.api_version,
        "env": settings.app_env,
    }


for api_router in ROUTERS:
    app.include_router(api_router, prefix=settings.api_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rentline_backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.app_debug,
    )
