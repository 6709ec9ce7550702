"""
FastAPI dependency injection functions.
The reward client is built once at startup and shared through app state.
"""

from fastapi import Request

from src.core.logger.logger import get_logger
from src.core.service.auth.cache.session_store import (
    InMemorySessionStore, RedisSessionStore, SessionStore
)
from src.core.service.gateway.reward_gateway import HttpRewardGateway
from src.core.service.reward_client import RewardClient
from src.core.service.rewards.claim_sequencer import ClaimSequencer
from src.infra.config.redis import get_redis
from src.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()


async def create_session_store() -> SessionStore:
    """Build the session store selected by SESSION_BACKEND."""
    if settings.SESSION_BACKEND == "memory":
        logger.warning("Using in-memory session store; sessions will not survive restarts")
        return InMemorySessionStore()
    if settings.SESSION_BACKEND == "redis":
        return RedisSessionStore(await get_redis())
    raise ValueError(f"Unsupported SESSION_BACKEND: {settings.SESSION_BACKEND}")


async def create_reward_client() -> RewardClient:
    """Build the process-wide reward client from settings."""
    return RewardClient(
        gateway=HttpRewardGateway(),
        session_store=await create_session_store(),
        sequencer=ClaimSequencer(
            tick_ms=settings.CLAIM_TICK_MS,
            display_delay_ms=settings.CLAIM_DISPLAY_DELAY_MS
        ),
        claim_duration_ms=settings.CLAIM_DURATION_MS
    )


def get_reward_client(request: Request) -> RewardClient:
    """Get the reward client dependency."""
    return request.app.state.reward_client
