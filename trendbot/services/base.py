"""Base FastAPI service with common functionality."""
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trendbot import __version__
from trendbot.core.errors import TrendBotError
from trendbot.core.logging import setup_logging, get_logger
from trendbot.core.settings import Settings

logger = get_logger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Map TrendBot errors and request validation failures to JSON bodies."""

    @app.exception_handler(TrendBotError)
    async def trendbot_error_handler(request: Request, exc: TrendBotError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(loc) for loc in err["loc"][1:]),
                "message": err["msg"],
            }
            for err in exc.errors()
        ]
        message = "Invalid request"
        if details:
            message = f"Invalid request: {details[0]['field']} {details[0]['message']}".strip()
        logger.warning(f"{request.method} {request.url.path} rejected: {message}")
        return JSONResponse(
            status_code=400,
            content={"error": "validation_failed", "message": message, "details": details},
        )


def create_app(service_name: str, settings: Settings, lifespan=None) -> FastAPI:
    """Create FastAPI application with common configuration."""
    setup_logging(service_name, settings)

    app = FastAPI(
        title=f"{settings.app_name} - {service_name.title()}",
        description=f"{settings.app_name} {service_name} service",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    @app.get("/healthz")
    async def health_check(request: Request):
        """Health check endpoint."""
        store = getattr(request.app.state, "store", None)
        provider = getattr(request.app.state, "llm_provider", None)
        try:
            if store is None:
                raise TrendBotError("Service not initialized")
            await store.ping()
        except TrendBotError as e:
            logger.error(f"{service_name} health check failed: {e.message}")
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "service": service_name,
                    "error": e.message,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                }
            )

        llm: Optional[dict] = await provider.health_check() if provider is not None else None
        return {
            "status": "healthy",
            "service": service_name,
            "version": __version__,
            "llm": llm,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"service": service_name, "version": __version__}

    return app
