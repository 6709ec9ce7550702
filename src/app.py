import json
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

from src.infra.config.settings import settings
from src.core.logger.logger import logger
from src.api.router import admin, app_state, auth, health, rewards
from src.api.middleware.logging.request_logging import RequestLoggingMiddleware
from src.core.dependencies import create_reward_client
from src.core.exceptions.base import ClientError
from src.core.exceptions.handler import GlobalErrorHandler
from src.core.service.reward_client import RewardClient


def _lifecycle_log(message: str) -> None:
    logger.info(json.dumps({
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION
    }))


def create_app(reward_client: Optional[RewardClient] = None) -> FastAPI:
    """
    Build the local HTTP surface of the reward client.

    Args:
        reward_client: Pre-built client (tests); built from settings on startup otherwise
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="""
Daily Reward client - phone + password login, 6-digit PIN verification and a once-per-day reward claim.

## Flow
- **Login**: `POST /api/v1/auth/login`, then `POST /api/v1/auth/pin`
- **Rewards**: `GET /api/v1/rewards/stats`, `POST /api/v1/rewards/claim`, poll `GET /api/v1/rewards/claim`
- **View**: `GET /api/v1/app/state` tells the presentation layer what to render
        """,
        version=settings.APP_VERSION,
        docs_url="/",
        redoc_url="/redoc"
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
        max_age=600,  # 10 minutes
    )

    # Request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Add centralized error handlers
    app.add_exception_handler(ClientError, GlobalErrorHandler.client_error_handler)
    app.add_exception_handler(RequestValidationError, GlobalErrorHandler.validation_error_handler)
    app.add_exception_handler(Exception, GlobalErrorHandler.general_exception_handler)

    # Include routers
    app.include_router(health.router, prefix="/api/v1")
    app.include_router(app_state.router, prefix="/api/v1")
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(rewards.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    app.state.reward_client = reward_client

    @app.on_event("startup")
    async def startup_event():
        _lifecycle_log("Starting reward client")

        if app.state.reward_client is None:
            app.state.reward_client = await create_reward_client()

        state = await app.state.reward_client.start()
        logger.info("Reward client ready", extra={"state": state.value})

    @app.on_event("shutdown")
    async def shutdown_event():
        _lifecycle_log("Shutting down reward client")
        if app.state.reward_client is not None:
            await app.state.reward_client.shutdown()

    return app
