"""
Domain errors raised by the order core.

Each error carries the HTTP status it maps to, so routers can let them
propagate and the handler registered in ``orderdesk.main`` renders a
consistent ``{"detail", "error_code", "path"}`` body.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class OrderDeskError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "ERROR"
    default_detail = "Request failed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(OrderDeskError):
    error_code = "VALIDATION_ERROR"
    default_detail = "Validation failed"


class NotFoundError(OrderDeskError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    default_detail = "Resource not found"


class EmptyOrderError(ValidationError):
    error_code = "EMPTY_ORDER"
    default_detail = "order must contain at least one item"


class InvalidStatusError(ValidationError):
    error_code = "INVALID_STATUS"
    default_detail = "Invalid status"


class OwnershipError(ValidationError):
    """A referenced record belongs to another vendor. Reported as validation, not authorization."""
    error_code = "OWNERSHIP"
    default_detail = "record belongs to a different vendor"


class InvalidTableError(OwnershipError):
    error_code = "INVALID_TABLE"
    default_detail = "table not found for this vendor"


class OrderArchivedError(ValidationError):
    error_code = "ORDER_ARCHIVED"
    default_detail = "order is archived"


class OrderNotEditableError(ValidationError):
    error_code = "ORDER_NOT_EDITABLE"
    default_detail = "only active orders can be edited"


class OrderNotFoundError(NotFoundError):
    error_code = "ORDER_NOT_FOUND"
    default_detail = "Order not found"


class MenuItemNotFoundError(NotFoundError):
    # the menu item is referenced from the request body, so this is a bad request
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "MENU_ITEM_NOT_FOUND"
    default_detail = "menu item not found"


async def handle_order_desk_error(request: Request, exc: OrderDeskError) -> JSONResponse:
    logger.info(f"{exc.error_code} at {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "error_code": exc.error_code,
            "path": str(request.url.path),
        },
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Request validation failed at {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": jsonable_errors(exc),
            "error_code": "VALIDATION_ERROR",
            "path": str(request.url.path),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in exc.errors()
    ]


def register_exception_handlers(app):
    app.add_exception_handler(OrderDeskError, handle_order_desk_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
