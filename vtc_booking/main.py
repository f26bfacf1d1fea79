import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .database import create_db_engine, create_session_factory, init_db
from .domain.admin.router import router as admin_router
from .domain.bookings.router import debug_router as bookings_debug_router
from .domain.bookings.router import router as bookings_router
from .email_service import EmailNotifier
from .exceptions import BookingError, BookingValidationError
from .rate_limiter import api_rate_limit
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def error_envelope(status_code: int, message: str, errors: Optional[list] = None, headers=None) -> JSONResponse:
    content = {"success": False, "message": message}
    if errors is not None:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} - {type(exc).__name__}: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} - {exc.status_code} {type(exc).__name__}")
        errors = exc.errors if isinstance(exc, BookingValidationError) else None
        return error_envelope(exc.status_code, exc.message, errors)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = [
            f"{'.'.join(str(p) for p in error.get('loc', ()) if p != 'body') or 'body'}: {error.get('msg')}"
            for error in exc.errors()
        ]
        logger.warning(f"Validation error for {request.url.path}: {errors}")
        return error_envelope(400, "Données invalides", errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = "Route non trouvée"
        elif isinstance(exc.detail, str):
            message = exc.detail
        else:
            message = "Erreur"
        return error_envelope(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} - Unhandled error: {exc}")
        return error_envelope(500, "Erreur interne du serveur")


def create_app(database_url: Optional[str] = None, notifier=None, engine=None) -> FastAPI:
    """
    Build the API.

    The engine, session factory and notifier are created here and owned by
    the application (app.state); request handlers reach them through
    dependencies only.
    """
    engine = engine or create_db_engine(database_url or config.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application starting up...")
        init_db(engine)
        yield
        logger.info("Application shutting down...")
        engine.dispose()

    app = FastAPI(
        title="VTC Booking API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.notifier = notifier if notifier is not None else EmailNotifier()

    register_exception_handlers(app)

    if config.SECURITY_HEADERS_ENABLED:
        app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])
        logger.info("Security headers enabled")
    else:
        logger.warning("Security headers DISABLED - only use in development!")

    logger.info(f"CORS allowed origins: {config.ALLOWED_ORIGINS}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
    )

    # Per-IP API quota applies to /api/* only
    api_quota = [Depends(api_rate_limit)]
    app.include_router(bookings_router, dependencies=api_quota)
    app.include_router(admin_router, dependencies=api_quota)
    if config.DEBUG_ROUTES_ENABLED:
        logger.warning("Debug routes ENABLED - POST /api/bookings/test-email/{id} is public")
        app.include_router(bookings_debug_router, dependencies=api_quota)

    @app.get("/")
    def root():
        return {"success": True, "message": "VTC Booking API is running"}

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app


app = create_app()
