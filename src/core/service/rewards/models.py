"""Models for the daily reward flow."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class RewardStats(BaseModel):
    """Reward counters for one identity, owned by the eligibility engine."""
    total_rewards: int = Field(0, ge=0, alias="totalRewards")
    last_reward_claim: Optional[str] = Field(None, alias="lastRewardClaim")  # YYYY-MM-DD
    join_date: Optional[str] = Field(None, alias="joinDate")
    last_login: Optional[str] = Field(None, alias="lastLogin")

    class Config:
        populate_by_name = True


class ClaimResult(BaseModel):
    """Counters returned by a successful reward commit."""
    total_rewards: int = Field(..., ge=0, alias="totalRewards")
    last_claimed: Optional[str] = Field(None, alias="lastClaimed")

    class Config:
        populate_by_name = True


class SequenceStatus(str, Enum):
    RUNNING = "running"
    COMPLETING = "completing"  # reached 100%, success screen showing
    COMMITTING = "committing"  # completion callback running
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SequenceSnapshot(BaseModel):
    """Point-in-time view of a claim sequence."""
    progress: float = Field(..., ge=0, le=100)
    label: str
    status: SequenceStatus
