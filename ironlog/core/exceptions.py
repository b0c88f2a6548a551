"""Domain exceptions and their HTTP mapping."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "Could not complete the request; try again."


class IronLogError(Exception):
    """Base for errors raised by the persistence, migration and export layers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class CanonicalValidationError(IronLogError):
    """A canonical workout document failed validation after migration."""

    status_code = 422

    def __init__(self, message: str, errors: list[str] | None = None, **context):
        super().__init__(message, **context)
        self.errors = errors or []


class NotFoundError(IronLogError):
    """A referenced workout, template or exercise does not exist (or is deleted)."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(IronLogError):
    """The request conflicts with the current state (e.g. finishing a finished workout)."""

    status_code = status.HTTP_409_CONFLICT


class WorkoutSaveError(IronLogError):
    """A multi-row workout save failed and was rolled back."""


class ExportError(IronLogError):
    """Rendering or importing an export artifact failed."""


async def canonical_validation_error_handler(request: Request, exc: CanonicalValidationError) -> JSONResponse:
    logger.warning("canonical_validation_failed", path=request.url.path, error=exc.message, **exc.context)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "errors": exc.errors},
    )


async def client_error_handler(request: Request, exc: IronLogError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def ironlog_error_handler(request: Request, exc: IronLogError) -> JSONResponse:
    """Save/export failures surface to the user as a generic retry message."""
    logger.error(
        "request_failed",
        path=request.url.path,
        error=exc.message,
        error_type=type(exc).__name__,
        **exc.context,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": GENERIC_FAILURE_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CanonicalValidationError, canonical_validation_error_handler)
    app.add_exception_handler(NotFoundError, client_error_handler)
    app.add_exception_handler(ConflictError, client_error_handler)
    app.add_exception_handler(IronLogError, ironlog_error_handler)
