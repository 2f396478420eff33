import datetime
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from m2m_auth_service.bootstrap import build_services
from m2m_auth_service.config import Settings, get_app_settings, settings
from m2m_auth_service.db import build_engine, build_session_factory, init_models, ping
from m2m_auth_service.exceptions import AuthServiceError, InvalidClient
from m2m_auth_service.logging_config import logger, setup_logging
from m2m_auth_service.rate_limiting import setup_rate_limiting
from m2m_auth_service.routers import authorizer_routes, client_routes, token_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle manager.

    Builds the engine and the service container once per worker process. A
    container already present on app.state (tests, embedding) is left alone.
    """
    logger.info("Application startup sequence initiated.")

    engine = None
    if getattr(app.state, "services", None) is None:
        engine = build_engine(settings.DATABASE_URL)
        await init_models(engine)
        app.state.services = build_services(settings, build_session_factory(engine))
    else:
        logger.info("Using pre-configured service container")

    logger.info("Application startup complete.")

    yield

    # --- Application Shutdown ---
    logger.info("Application shutdown sequence initiated.")
    if engine is not None:
        await engine.dispose()
        app.state.services = None
    logger.info("Application shutdown complete.")


app = FastAPI(
    title="M2M Auth Service API",
    description="Client-credentials token issuance, bearer token authorization and client administration for machine-to-machine calls.",
    version="1.0.0",
    root_path=settings.ROOT_PATH,
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Token Acquisition",
            "description": "Operations for obtaining access tokens for machine-to-machine (M2M) communication.",
        },
        {
            "name": "Authorizer",
            "description": "Allow/Deny policy decisions for bearer tokens, invoked by the request router.",
        },
        {
            "name": "Admin - Clients",
            "description": "Administrative operations for managing application clients.",
        },
    ],
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Track app startup time for uptime monitoring in health checks
app.startup_time = time.time()

# Setup logging configuration (request ID and logging middleware)
setup_logging(app)

# Setup rate limiting
setup_rate_limiting(app)

# Include Routers
app.include_router(token_routes.router)
app.include_router(authorizer_routes.router)
app.include_router(client_routes.router)


# Exception handlers
@app.exception_handler(AuthServiceError)
async def auth_service_exception_handler(request: Request, exc: AuthServiceError):
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.__class__.__name__} on {request.url.path}: {exc.error}")

    headers = {}
    if isinstance(exc, InvalidClient):
        headers = {"WWW-Authenticate": "Basic", "Cache-Control": "no-store"}
    return JSONResponse(
        status_code=exc.status_code, content={"error": exc.error}, headers=headers
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Only locations and error types; submitted values may hold credentials.
    problems = [
        {"loc": list(error.get("loc", ())), "type": error.get("type")}
        for error in exc.errors()
    ]
    logger.warning(f"ValidationError on {request.url.path}: {problems}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"error": "invalid_request"}
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"HTTPException {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled {exc.__class__.__name__} on {request.url.path}", exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "server_error"},
    )


@app.get("/health", tags=["Health"])
async def health(request: Request, app_settings: Settings = Depends(get_app_settings)):
    """Liveness plus component status.

    Reports database reachability, whether the signing secret has been
    memoized yet and the number of cached authorization decisions. The secret
    is loaded lazily, so an unloaded secret does not degrade the status.
    """
    response = {
        "status": "ok",
        "version": app.version,
        "environment": app_settings.ENVIRONMENT.value,
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "uptime": time.time() - app.startup_time,
        "components": {"api": {"status": "ok"}},
    }

    services = getattr(request.app.state, "services", None)
    if services is None:
        response["status"] = "starting"
        return JSONResponse(
            content=response, status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    try:
        start_time = time.time()
        await ping(services.session_factory)
        response["components"]["database"] = {
            "status": "ok",
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        }
    except Exception as e:
        logger.error(f"Health check - Database error: {e.__class__.__name__}")
        response["components"]["database"] = {
            "status": "error",
            "message": "Database connection failed",
            "error_type": e.__class__.__name__,
        }
        response["status"] = "degraded"

    response["components"]["signing_secret"] = {
        "status": "ok",
        "loaded": services.secret_accessor.is_loaded,
    }
    response["components"]["decision_cache"] = {
        "status": "ok",
        "entries": len(services.decision_cache),
    }

    status_code = (
        status.HTTP_200_OK
        if response["status"] == "ok"
        else status.HTTP_503_SERVICE_UNAVAILABLE
    )
    logger.debug(f"Health check completed with status: {response['status']}")
    return JSONResponse(content=response, status_code=status_code)
