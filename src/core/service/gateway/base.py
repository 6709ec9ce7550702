"""
Reward service gateway abstraction.
The client core only talks to the remote service through this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from src.core.service.auth.models.session import Identity
from src.core.service.gateway.models import AdminOverview
from src.core.service.rewards.models import ClaimResult, RewardStats


class RewardGateway(ABC):
    """
    Abstract remote collaborator for authentication and reward counters.
    Implementations must convert every transport failure into a ClientError subclass.
    """

    @abstractmethod
    async def login(self, phone: str, password: str) -> None:
        """
        Check phone and password.

        Raises:
            AuthError: Credentials rejected or the call failed
        """
        pass

    @abstractmethod
    async def verify_pin(self, phone: str, pin: str) -> Identity:
        """
        Verify the PIN for a phone that passed the login step.

        Raises:
            AuthError: PIN rejected or the call failed
        """
        pass

    @abstractmethod
    async def get_user_stats(self, phone: str) -> RewardStats:
        """Raises FetchError on failure"""
        pass

    @abstractmethod
    async def collect_reward(self, phone: str) -> ClaimResult:
        """Raises ClaimError on failure"""
        pass

    @abstractmethod
    async def get_all_users(self) -> AdminOverview:
        """Raises FetchError on failure"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Raises FetchError on failure"""
        pass

    async def close(self) -> None:
        """Release network resources"""
        pass
