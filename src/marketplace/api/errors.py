"""Translate marketplace and framework errors into ``{message, errors?}`` bodies."""

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from marketplace.errors import MarketplaceError
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def _flatten(messages) -> list[str]:
    if not isinstance(messages, dict):
        return [str(messages)]

    flat = []
    for field, msgs in messages.items():
        for msg in msgs if isinstance(msgs, list) else [msgs]:
            flat.append(f"{field}: {msg}")
    return flat


async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"message": "Validation failed", "errors": _flatten(exc.messages)},
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
    return JSONResponse(status_code=400, content={"message": "Validation failed", "errors": errors})


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"message": "Not found"})


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)}, headers=exc.headers)


def register_error_handlers(app: FastAPI) -> None:
    """Install protean's handlers, then override the shapes the storefront expects."""
    register_exception_handlers(app)
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
