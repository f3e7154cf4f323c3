"""JSON error bodies for every failure path.

Every error response carries ``detail``. Validation failures add ``errors``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


def validation_errors(exc: RequestValidationError) -> list[dict]:
    """Pydantic errors with their ``ctx`` values stringified so they serialize."""
    errors = []
    for err in exc.errors():
        item = {key: value for key, value in err.items() if key != "ctx"}
        if "ctx" in err:
            item["ctx"] = {key: str(value) for key, value in err["ctx"].items()}
        errors.append(item)
    return errors


async def _http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code, headers=exc.headers)


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = validation_errors(exc)
    logger.info("request_invalid", path=request.url.path, error_count=len(errors))
    return JSONResponse({"detail": "Validation error", "errors": errors}, status_code=422)


async def _integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    # Unique constraints (one award per badge, one certificate per project...)
    # that a concurrent request won first.
    logger.warning("integrity_error", path=request.url.path, method=request.method, error=str(exc.orig))
    return JSONResponse({"detail": "Conflicting record already exists"}, status_code=409)


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_exception", path=request.url.path, method=request.method, exc_info=exc)
    return JSONResponse({"detail": "Internal server error"}, status_code=500)


def setup_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error)
