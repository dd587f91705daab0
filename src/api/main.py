"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from infrastructure.database.dependencies import close_database_connections
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.settings import get_settings
from infrastructure.version import __version__
from users.presentation import router as users_router

_probe = DefaultStartupProbe()

# Location segments FastAPI prepends to field names
_REQUEST_SECTIONS = {"body", "query", "path", "header", "cookie"}


@asynccontextmanager
async def userbase_lifespan(app: FastAPI):
    """Application lifespan context.

    Engines are created lazily on the first request and disposed here on
    shutdown.
    """
    _probe.application_started(app_name=app.title, version=__version__)

    yield

    await close_database_connections()
    _probe.application_stopped()


def request_errors_to_field_map(exc: RequestValidationError) -> dict[str, list[str]]:
    """Convert FastAPI's error list into a field-error map.

    Args:
        exc: The validation error raised while parsing the request

    Returns:
        Mapping of field name to messages, e.g. {"per_page": ["..."]}
    """
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        fields = [part for part in loc if part not in _REQUEST_SECTIONS]
        field = ".".join(fields) if fields else (loc[0] if loc else "request")
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return errors


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request parsing failures in the same shape as field validation."""
    errors = request_errors_to_field_map(exc)
    _probe.request_rejected(path=request.url.path, fields=sorted(errors))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": "Validation failed.", "errors": errors},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the application's exception handlers on app."""
    app.add_exception_handler(RequestValidationError, request_validation_handler)


def create_app() -> FastAPI:
    """Build the FastAPI application from settings."""
    settings = get_settings()
    configure_logging(settings.log_level)

    application = FastAPI(
        title=settings.app_name,
        description="User management REST API",
        version=__version__,
        debug=settings.debug,
        lifespan=userbase_lifespan,
    )
    register_exception_handlers(application)

    application.include_router(users_router)

    @application.get("/health")
    def health():
        """Basic health check endpoint."""
        return {"status": "ok"}

    return application


app = create_app()
