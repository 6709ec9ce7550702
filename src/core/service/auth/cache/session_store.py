import json
from abc import ABC, abstractmethod
from typing import Dict, Optional

from pydantic import ValidationError as PydanticValidationError
from redis.asyncio import Redis

from src.core.logger.logger import get_logger
from src.core.service.auth.models.session import Identity
from src.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()


class SessionStore(ABC):
    """Persistence for the one signed-in Identity; absence means logged out"""

    def __init__(self, key: Optional[str] = None):
        self.key = key or settings.SESSION_KEY

    def _serialize_identity(self, identity: Identity) -> str:
        """Convert Identity to the service's camelCase JSON"""
        return json.dumps(identity.model_dump(by_alias=True))

    def _deserialize_identity(self, data: str) -> Optional[Identity]:
        """Convert stored JSON back to Identity; unreadable data yields None"""
        try:
            return Identity.model_validate(json.loads(data))
        except (json.JSONDecodeError, PydanticValidationError, TypeError) as e:
            logger.warning(
                "Discarding unreadable stored session",
                extra={"error": str(e)}
            )
            return None

    @abstractmethod
    async def _get_raw(self) -> Optional[str]:
        pass

    @abstractmethod
    async def _set_raw(self, data: str) -> None:
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove the stored identity"""
        pass

    async def read(self) -> Optional[Identity]:
        """Return the stored identity, clearing it if it cannot be decoded"""
        data = await self._get_raw()
        if not data:
            return None

        identity = self._deserialize_identity(data)
        if identity is None:
            await self.clear()
        return identity

    async def write(self, identity: Identity) -> None:
        """Store identity, replacing any previous one"""
        await self._set_raw(self._serialize_identity(identity))
        logger.info("Session stored", extra={"phone": identity.phone})


class RedisSessionStore(SessionStore):
    """Redis-based session store, survives process restarts"""

    def __init__(self, redis_client: Redis, key: Optional[str] = None):
        super().__init__(key)
        self.redis = redis_client

    async def _get_raw(self) -> Optional[str]:
        try:
            return await self.redis.get(self.key)
        except Exception as e:
            logger.error(
                "Failed to read session",
                extra={"error": str(e)}
            )
            raise

    async def _set_raw(self, data: str) -> None:
        try:
            await self.redis.set(self.key, data)
        except Exception as e:
            logger.error(
                "Failed to write session",
                extra={"error": str(e)}
            )
            raise

    async def clear(self) -> None:
        try:
            await self.redis.delete(self.key)
            logger.info("Session cleared")
        except Exception as e:
            logger.error(
                "Failed to clear session",
                extra={"error": str(e)}
            )
            raise


class InMemorySessionStore(SessionStore):
    """Process-local session store for development and tests; lost on restart"""

    def __init__(self, key: Optional[str] = None):
        super().__init__(key)
        self._data: Dict[str, str] = {}

    async def _get_raw(self) -> Optional[str]:
        return self._data.get(self.key)

    async def _set_raw(self, data: str) -> None:
        self._data[self.key] = data

    async def clear(self) -> None:
        self._data.pop(self.key, None)
