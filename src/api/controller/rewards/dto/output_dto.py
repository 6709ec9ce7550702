"""
Output DTOs for reward API endpoints.
"""

from pydantic import BaseModel, Field
from typing import Optional

from src.core.service.auth.models.session import AppState
from src.core.service.rewards.models import RewardStats, SequenceStatus


class StatsResponseDto(BaseModel):
    """DTO for the signed-in user's reward stats."""

    success: bool = True
    stats: RewardStats
    can_claim_today: bool = Field(..., alias="canClaimToday", description="Today's reward is still available")

    class Config:
        populate_by_name = True


class ClaimStatusResponseDto(BaseModel):
    """DTO for the claim sequence progress."""

    success: bool = True
    state: AppState
    progress: float = Field(..., ge=0, le=100, description="Percent complete")
    label: str = Field(..., description="Text to show under the progress bar")
    status: SequenceStatus
    stats: Optional[RewardStats] = Field(None, description="Stats after the claim, once committed")
    last_error: Optional[str] = Field(None, alias="lastError")

    class Config:
        populate_by_name = True


class CancelClaimResponseDto(BaseModel):
    success: bool = Field(..., description="The sequence was stopped before committing")
    state: AppState
