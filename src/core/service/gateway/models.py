"""Wire models for the reward service."""

from typing import List, Optional
from pydantic import BaseModel, Field

from src.core.service.auth.models.session import Identity
from src.core.service.rewards.models import RewardStats


class ServiceResponse(BaseModel):
    """Envelope shared by every reward service response."""
    success: bool = False
    error: Optional[str] = None


class VerifyPinResponse(ServiceResponse):
    user: Optional[Identity] = None


class UserStatsResponse(ServiceResponse):
    stats: Optional[RewardStats] = None


class CollectRewardResponse(ServiceResponse):
    total_rewards: Optional[int] = Field(None, ge=0, alias="totalRewards")
    last_claimed: Optional[str] = Field(None, alias="lastClaimed")

    class Config:
        populate_by_name = True


class AdminUser(BaseModel):
    """User row of the admin listing. Secrets the service may send are not kept."""
    id: str
    phone: str
    name: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")
    last_login: Optional[str] = Field(None, alias="lastLogin")
    total_rewards: int = Field(0, ge=0, alias="totalRewards")
    is_active: bool = Field(False, alias="isActive")
    last_reward_claim: Optional[str] = Field(None, alias="lastRewardClaim")
    has_pin_set: bool = Field(False, alias="hasPinSet")

    class Config:
        populate_by_name = True


class AdminOverview(ServiceResponse):
    users: List[AdminUser] = Field(default_factory=list)
    total_users: int = Field(0, alias="totalUsers")
    active_users: int = Field(0, alias="activeUsers")
    total_rewards: int = Field(0, alias="totalRewards")

    class Config:
        populate_by_name = True
