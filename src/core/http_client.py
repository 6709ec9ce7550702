"""
HTTP client configuration for the reward service.
NO RETRY mechanisms - failures surface once and the user re-triggers.
NO GLOBAL instances - the gateway owns its client lifecycle.
"""

import httpx
from typing import Optional, Dict, Any

from src.infra.config.settings import get_settings

settings = get_settings()


class HTTPClientConfig:
    """HTTP client configuration for the reward service gateway"""

    @classmethod
    def get_base_headers(cls) -> Dict[str, str]:
        """Get base headers for HTTP requests"""
        headers = {
            "User-Agent": f"{settings.APP_NAME}-Client/{settings.APP_VERSION}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if settings.REWARD_SERVICE_API_KEY:
            headers["Authorization"] = f"Bearer {settings.REWARD_SERVICE_API_KEY}"
        return headers

    @classmethod
    def create_client_config(cls, timeout: Optional[float] = None) -> Dict[str, Any]:
        """
        Create HTTP client configuration (NOT the client itself).

        Args:
            timeout: Override timeout (optional)

        Returns:
            Dict with client configuration
        """
        return {
            "base_url": settings.REWARD_SERVICE_URL,
            "timeout": timeout or settings.HTTP_DEFAULT_TIMEOUT,
            "limits": httpx.Limits(
                max_connections=settings.HTTP_MAX_CONNECTIONS,
                max_keepalive_connections=settings.HTTP_MAX_KEEPALIVE_CONNECTIONS
            ),
            "headers": cls.get_base_headers(),
            "follow_redirects": False,
        }


def create_reward_service_client(**kwargs) -> httpx.AsyncClient:
    """
    Create an HTTP client for the reward service.
    WARNING: Remember to close the client after use!

    Args:
        **kwargs: Additional httpx.AsyncClient arguments (e.g. transport in tests)

    Returns:
        httpx.AsyncClient: Configured client (must be closed!)
    """
    config = HTTPClientConfig.create_client_config()
    config.update(kwargs)
    return httpx.AsyncClient(**config)
