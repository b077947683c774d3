# storefront/api/__init__.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from storefront.api.routers import addresses, carts, checkout, customers, health, products
from storefront.domain.errors import CommerceError, ErrorCategory, UpstreamUnavailable
from storefront.domain.schemas import ErrorOut
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ROUTERS = (
    health.router,
    customers.router,
    products.router,
    carts.router,
    addresses.router,
    checkout.router,
)

STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.CONFLICT: 409,
    ErrorCategory.UPSTREAM: 503,
    ErrorCategory.INVARIANT: 500,
}

ERROR_RESPONSES = {status: {"model": ErrorOut} for status in STATUS_BY_CATEGORY.values()}


async def commerce_error_handler(request: Request, exc: CommerceError) -> JSONResponse:
    status = STATUS_BY_CATEGORY[exc.category]
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} -> {status} {exc.code.value}: {exc.message}")

    headers = {"Retry-After": "1"} if exc.category is ErrorCategory.UPSTREAM else None
    return JSONResponse(
        status_code=status,
        content={"code": exc.code.value, "message": exc.message},
        headers=headers,
    )


async def store_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
    #reads outside a unit of work reach here directly
    logger.error(f"Relational store unavailable on {request.method} {request.url.path}: {exc}")
    return await commerce_error_handler(
        request, UpstreamUnavailable("relational store is unavailable")
    )


def register(app: FastAPI) -> FastAPI:
    for router in ROUTERS:
        app.include_router(router, responses=ERROR_RESPONSES)
    app.add_exception_handler(CommerceError, commerce_error_handler)
    app.add_exception_handler(OperationalError, store_error_handler)
    return app
