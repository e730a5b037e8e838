"""Response envelopes and the mapping from domain failures to HTTP status codes.

Success:  {"success": true, "message": ..., "data": ..., "pagination": ...}
Failure:  {"success": false, "kind": ..., "message": ..., "errors": [...]}
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from storefront.shared.errors import StorefrontError

logger = structlog.get_logger(__name__)

STATUS_CODES = {
    "EmptyCart": 400,
    "UnavailableItem": 400,
    "InsufficientStock": 400,
    "InvalidTransition": 400,
    "ValidationFailed": 400,
    "Unauthorized": 401,
    "Forbidden": 403,
    "NotFound": 404,
    "DuplicateReview": 409,
    "OrderPlacementFailed": 500,
}


def success(data=None, message="Success", pagination=None) -> dict:
    body = {"success": True, "message": message, "data": data}
    if pagination is not None:
        body["pagination"] = pagination
    return body


def failure(kind, message, errors=None) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_CODES.get(kind, 500),
        content={"success": False, "kind": kind, "message": message, "errors": list(errors or [])},
    )


def field_errors(messages) -> list[dict]:
    """Flatten Protean's ``{"field": ["msg", ...]}`` into a list of field/message pairs."""
    errors = []
    for field_name, field_messages in (messages or {}).items():
        if isinstance(field_messages, (list, tuple)):
            errors.extend({"field": field_name, "message": str(m)} for m in field_messages)
        else:
            errors.append({"field": field_name, "message": str(field_messages)})
    return errors


async def _storefront_error(request: Request, exc: StorefrontError) -> JSONResponse:
    if STATUS_CODES.get(exc.kind, 500) >= 500:
        logger.error("Request failed", path=request.url.path, kind=exc.kind, error=exc.message)
    return failure(exc.kind, exc.message, exc.errors)


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    errors = field_errors(exc.messages)
    message = errors[0]["message"] if len(errors) == 1 else "Validation failed"
    return failure("ValidationFailed", message, errors)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(part) for part in error["loc"] if part != "body"), "message": error["msg"]}
        for error in exc.errors()
    ]
    return failure("ValidationFailed", "Validation failed", errors)


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return failure("NotFound", "Resource not found")


def register_error_handlers(app: FastAPI) -> None:
    # Protean's handlers cover its remaining exceptions; ours take precedence
    register_exception_handlers(app)
    app.add_exception_handler(StorefrontError, _storefront_error)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
