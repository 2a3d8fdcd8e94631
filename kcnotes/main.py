"""
KC Notes authentication service.

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kcnotes.api import router as api_router
from kcnotes.api.deps import get_request_id
from kcnotes.api.middleware.request_id import RequestIdMiddleware
from kcnotes.config import DEFAULT_SECRET_KEY, Settings, get_settings
from kcnotes.database import close_db, create_engine, create_session_maker, init_db
from kcnotes.kernel.identity import (
    IdentityError,
    IdentityService,
    JWTManager,
    PasswordHasher,
    RequestAuthenticator,
    SqlAlchemyUserRepository,
)
from kcnotes.logging_config import configure_logging, get_logger
from kcnotes.schemas.common import HealthResponse

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application and wire its services.

    The identity service and authenticator are constructed once here and
    shared by every request through ``app.state``.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        configure_logging(
            log_level=settings.log_level,
            environment=settings.environment,
            debug=settings.debug,
        )

        logger.info("Starting %s v%s", settings.project_name, settings.version)
        if settings.secret_key == DEFAULT_SECRET_KEY and settings.environment != "development":
            logger.warning("SECRET_KEY is the development placeholder; tokens can be forged")

        await init_db(app.state.engine)
        logger.info("Database initialized")

        yield

        logger.info("Shutting down...")
        await close_db(app.state.engine)
        logger.info("Database connections closed")

    app = FastAPI(
        title=settings.project_name,
        description="User registration, authentication and credential lifecycle for KC Notes.",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    engine = create_engine(settings.database_url, echo=settings.debug)
    users = SqlAlchemyUserRepository(create_session_maker(engine))
    jwt_manager = JWTManager(
        secret_key=settings.secret_key,
        algorithm=settings.algorithm,
        access_token_expire_minutes=settings.access_token_expire_minutes,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.identity_service = IdentityService(
        users=users,
        password_hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        jwt_manager=jwt_manager,
    )
    app.state.authenticator = RequestAuthenticator(jwt_manager=jwt_manager, users=users)

    # add_middleware stacks innermost-first; CORS last so it wraps error responses too
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app, settings)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Check application health."""
        return HealthResponse(status="ok", version=settings.version)

    app.include_router(api_router)

    return app


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:

    @app.exception_handler(IdentityError)
    async def identity_exception_handler(request: Request, exc: IdentityError):
        """Render the identity error taxonomy as {detail, code}."""
        headers = {}
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers["WWW-Authenticate"] = "Bearer"
        content = exc.to_dict()
        if exc.status_code >= 500:
            content["request_id"] = get_request_id(request)
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed request bodies are client errors (400)."""
        errors = []
        for error in exc.errors():
            errors.append({
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            })
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Validation error", "code": "validation_error", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception("Unhandled exception: %s", exc)
        req_id = get_request_id(request)
        if settings.debug:
            content = {"detail": str(exc), "type": type(exc).__name__, "request_id": req_id}
        else:
            content = {"detail": "Internal server error", "request_id": req_id}
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


app = create_app()


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "kcnotes.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
