"""
Venue Directory Backend: FastAPI Application Factory
=======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires settings, the database pool, the places client,
       middleware, exception handlers and routers, and returns the app.
Who:   uvicorn (`uvicorn venuedir.main:app`) and the test suite, which calls
       create_app() with its own Database and PlacesClient.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Access Log → CORS        │
    │                                                     │
    │  Routes:                                            │
    │    GET  /health          POST /api/auth/login       │
    │    /api/restaurants[/{id}]   (bearer)               │
    │    /api/places/search, /api/places/details/{id}     │
    │                                                     │
    │  Exception Handlers:                                │
    │    400 validation   401/403 auth   404   409        │
    │    500 database / unexpected   502 places provider  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Report missing security configuration
    3. Wait for the database (fixed attempts, fixed delay); give up → exit
    Shutdown:
    1. Close the places HTTP client
    2. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tenacity import AsyncRetrying, before_sleep_log, stop_after_attempt, wait_fixed

from venuedir import __version__
from venuedir.config import Settings, settings as default_settings
from venuedir.database import Database
from venuedir.dependencies import require_identity
from venuedir.exceptions import (
    AuthenticationRequiredError,
    ConflictError,
    DatabaseError,
    InvalidCredentialError,
    NotFoundError,
    UpstreamServiceError,
    ValidationError,
    VenueDirError,
)
from venuedir.middleware.logging import RequestLoggingMiddleware
from venuedir.middleware.request_id import RequestIDMiddleware, request_id_var
from venuedir.routes import auth, health, places, restaurants
from venuedir.services.places_client import PlacesClient

logger = logging.getLogger(__name__)

# Routers whose every endpoint depends on require_identity
PROTECTED_PREFIXES = ("/api/restaurants", "/api/places")


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger once, at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s on stdout.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Startup Connectivity Check
# ══════════════════════════════════════════════════════════════════════════

async def wait_for_database(database: Database, attempts: int, delay: float) -> None:
    """
    Ping the database until it answers.

    Makes at most `attempts` tries, `delay` seconds apart. The last failure
    is re-raised, which aborts startup.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(delay),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            logger.info(
                "Testing database connection (attempt %d/%d)...",
                attempt.retry_state.attempt_number,
                attempts,
            )
            await database.ping()
    logger.info("Database connection successful")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("=" * 60)
    logger.info("Venue Directory backend starting (environment=%s)", settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    try:
        await wait_for_database(
            app.state.database,
            attempts=settings.startup_db_attempts,
            delay=settings.startup_db_delay,
        )
    except Exception:
        logger.critical(
            "Failed to connect to the database after %d attempts",
            settings.startup_db_attempts,
        )
        raise

    logger.info("Server ready on port %d", settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Shutting down gracefully...")
    await app.state.places_client.aclose()
    await app.state.database.dispose()
    logger.info("Database connections closed")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(
    message: str,
    code: str,
    details: Optional[dict] = None,
) -> dict:
    content = {
        "error": message,
        "code": code,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return content


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to JSON responses.

        ValidationError / RequestValidationError → 400
        AuthenticationRequiredError              → 401
        InvalidCredentialError                   → 401 or 403 (exc.status_code)
        NotFoundError                            → 404
        ConflictError                            → 409
        DatabaseError                            → 500
        UpstreamServiceError                     → 502
        VenueDirError (other) / Exception        → 500

    Server-side failures return a generic message; the underlying reason is
    logged, and echoed in `details` only when ENVIRONMENT=development.
    """
    settings: Settings = app.state.settings

    def server_details(exc: VenueDirError) -> Optional[dict]:
        return exc.context if settings.is_development and exc.context else None

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=error_body(exc.message, exc.code, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        # FastAPI parses the body before resolving dependencies; an
        # unauthenticated caller still gets 401/403, never a body error.
        if request.url.path.startswith(PROTECTED_PREFIXES):
            try:
                require_identity(request, settings)
            except AuthenticationRequiredError as auth_exc:
                return await handle_authentication_required(request, auth_exc)
            except InvalidCredentialError as auth_exc:
                return await handle_invalid_credential(request, auth_exc)

        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Invalid request: %s", request_id_var.get(""), errors)
        return JSONResponse(
            status_code=400,
            content=error_body("Invalid request", "validation_error", {"errors": errors}),
        )

    @app.exception_handler(AuthenticationRequiredError)
    async def handle_authentication_required(request: Request, exc: AuthenticationRequiredError):
        return JSONResponse(
            status_code=401,
            content=error_body(exc.message, exc.code),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(InvalidCredentialError)
    async def handle_invalid_credential(request: Request, exc: InvalidCredentialError):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.code),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=error_body(exc.message, exc.code),
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return JSONResponse(
            status_code=409,
            content=error_body(exc.message, exc.code, exc.context),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=error_body(exc.message, exc.code, server_details(exc)),
        )

    @app.exception_handler(UpstreamServiceError)
    async def handle_upstream_error(request: Request, exc: UpstreamServiceError):
        rid = request_id_var.get("")
        logger.error("[%s] Places provider error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=502,
            content=error_body(exc.message, exc.code, server_details(exc)),
        )

    @app.exception_handler(VenueDirError)
    async def handle_app_error(request: Request, exc: VenueDirError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.code, server_details(exc)),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        details = {"reason": str(exc)} if settings.is_development else None
        return JSONResponse(
            status_code=500,
            content=error_body(
                "An unexpected error occurred",
                "internal_server_error",
                details,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    places_client: Optional[PlacesClient] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings:       defaults to the environment-loaded settings
        database:       defaults to a pool built from settings.database_url
        places_client:  defaults to a client built from settings
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Venue Directory API",
        description="Restaurant, bar and cafe directory with authenticated editing.",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database or Database.from_settings(settings)
    app.state.places_client = places_client or PlacesClient.from_settings(settings)

    # Middleware executes in reverse order of addition:
    # RequestID → Logging → CORS → routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(restaurants.router)
    app.include_router(places.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "venuedir.main:app",
        host=default_settings.backend_host,
        port=default_settings.port,
    )
