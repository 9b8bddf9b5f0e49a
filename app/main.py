import logging
import sys

import uvicorn
from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import AsyncOpenAI
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import router
from app.core.config import Settings
from app.core.exceptions import ConfigurationError
from app.core.exceptions import GatewayError
from app.core.logging import LOGGING_CONFIG
from app.core.logging import setup_logging
from app.models.proposal_models import HealthResponse
from app.services.llm import build_client
from app.services.llm import build_generation_config
from app.services.proposal_service import ProposalService

setup_logging()

logger = logging.getLogger(__name__)


async def gateway_exception_handler(_request: Request, exc: GatewayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Gateway error: %s (status: %d)", exc.message, exc.status_code)
    else:
        logger.info("Request rejected: %s (status: %d)", exc.message, exc.status_code)
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.error(f"HTTP exception: {exc.detail} (status: {exc.status_code})")
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


def create_app(settings: Settings | None = None, client: AsyncOpenAI | None = None) -> FastAPI:
    """Builds the gateway application.

    Settings, the generation config and the provider client are created once
    here and shared read-only by every request.

    Raises:
        ConfigurationError: If the provider credential or the shared secret is missing.
    """
    settings = settings or Settings()
    settings.require_secrets()
    generation_config = build_generation_config(settings)
    client = client or build_client(settings)

    app = FastAPI(title="Propuesta AI Service")
    app.state.settings = settings
    app.state.proposal_service = ProposalService(settings, client, generation_config)

    @app.on_event("startup")
    async def startup_event() -> None:
        logger.info("AI service escuchando en http://%s:%d", settings.host, settings.port)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        await client.close()

    app.add_exception_handler(GatewayError, gateway_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    @app.get("/health", status_code=status.HTTP_200_OK, response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        logger.debug("Health check endpoint called")
        return HealthResponse(ok=True)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


def run() -> None:
    """Console entry point: validates configuration, then serves the app with uvicorn."""
    try:
        settings = Settings()
        settings.require_secrets()
    except ConfigurationError as e:
        logger.critical(str(e))
        sys.exit(1)

    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=LOGGING_CONFIG,
    )


if __name__ == "__main__":
    run()
