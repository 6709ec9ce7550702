"""
HTTP client for the remote reward service.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Type
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from src.core.exceptions.base import AuthError, ClaimError, ClientError, FetchError
from src.core.http_client import create_reward_service_client
from src.core.logger.logger import get_logger
from src.core.service.auth.models.session import Identity
from src.core.service.gateway.base import RewardGateway
from src.core.service.gateway.models import (
    AdminOverview, CollectRewardResponse, ServiceResponse, UserStatsResponse, VerifyPinResponse
)
from src.core.service.rewards.models import ClaimResult, RewardStats

logger = get_logger(__name__)


class HttpRewardGateway(RewardGateway):
    """Reward service gateway over JSON/HTTP"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client or create_reward_service_client()
        self.logger = logger

    async def _request(
        self,
        method: str,
        path: str,
        error_cls: Type[ClientError],
        body: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Send one request and return the decoded JSON body.

        Raises:
            error_cls: On timeout, connection error, non-2xx status or non-JSON body
        """
        start_time = datetime.now(timezone.utc)
        try:
            response = await self.client.request(method, path, json=body)
        except httpx.TimeoutException:
            self.logger.error(
                "Reward service timeout",
                extra={"error": f"{method} {path} timed out"}
            )
            raise error_cls("The reward service took too long to respond. Please try again.")
        except httpx.RequestError as e:
            self.logger.error(
                "Reward service connection error",
                extra={"error": str(e)}
            )
            raise error_cls("Could not reach the reward service. Please try again.")

        duration_ms = round((datetime.now(timezone.utc) - start_time).total_seconds() * 1000, 2)

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError):
            data = None

        if response.is_error:
            message = None
            if isinstance(data, dict):
                message = data.get("error")
            message = message or f"HTTP error! status: {response.status_code}"
            self.logger.error(
                "Reward service returned error status",
                extra={
                    "status_code": response.status_code,
                    "error": message,
                    "duration_ms": duration_ms
                }
            )
            raise error_cls(message, details={"status_code": response.status_code})

        if not isinstance(data, dict):
            self.logger.error(
                "Non-JSON response from reward service",
                extra={"status_code": response.status_code, "error": response.text[:200]}
            )
            raise error_cls()

        self.logger.debug(
            "Reward service response received",
            extra={"status_code": response.status_code, "duration_ms": duration_ms}
        )
        return data

    def _parse(self, model, data: Dict[str, Any], error_cls: Type[ClientError], message: str):
        """Validate a response envelope; success:false counts as a failure"""
        try:
            parsed = model.model_validate(data)
        except PydanticValidationError as e:
            self.logger.error("Malformed reward service response", extra={"error": str(e)})
            raise error_cls(message)

        if not parsed.success:
            raise error_cls(parsed.error or message)
        return parsed

    async def login(self, phone: str, password: str) -> None:
        data = await self._request(
            "POST", "/auth/login", AuthError, {"phone": phone, "password": password}
        )
        self._parse(ServiceResponse, data, AuthError, "Login failed. Please try again.")

    async def verify_pin(self, phone: str, pin: str) -> Identity:
        data = await self._request(
            "POST", "/auth/verify-pin", AuthError, {"phone": phone, "pin": pin}
        )
        parsed = self._parse(VerifyPinResponse, data, AuthError, "Invalid PIN code. Please try again.")
        if parsed.user is None:
            raise AuthError("PIN verification failed. Please try again.")
        return parsed.user

    async def get_user_stats(self, phone: str) -> RewardStats:
        data = await self._request(
            "GET", f"/user/stats/{quote(phone, safe='')}", FetchError
        )
        parsed = self._parse(UserStatsResponse, data, FetchError, "Failed to load user stats")
        if parsed.stats is None:
            raise FetchError("Failed to load user stats")
        return parsed.stats

    async def collect_reward(self, phone: str) -> ClaimResult:
        data = await self._request(
            "POST", "/rewards/collect", ClaimError, {"phone": phone}
        )
        parsed = self._parse(CollectRewardResponse, data, ClaimError, "Failed to collect reward")
        if parsed.total_rewards is None:
            raise ClaimError("Failed to collect reward")
        return ClaimResult(total_rewards=parsed.total_rewards, last_claimed=parsed.last_claimed)

    async def get_all_users(self) -> AdminOverview:
        data = await self._request("GET", "/admin/users", FetchError)
        return self._parse(AdminOverview, data, FetchError, "Failed to load admin data")

    async def health_check(self) -> Dict[str, Any]:
        return await self._request("GET", "/health", FetchError)

    async def close(self) -> None:
        await self.client.aclose()
