"""
Rewards controller: stats, and the claim sequence lifecycle.
"""

from fastapi import APIRouter, Depends, status

from src.api.controller.rewards.dto.output_dto import (
    CancelClaimResponseDto, ClaimStatusResponseDto, StatsResponseDto
)
from src.core.dependencies import get_reward_client
from src.core.exceptions.base import InvalidStateError
from src.core.logger.logger import get_logger
from src.core.service.reward_client import RewardClient

logger = get_logger(__name__)
router = APIRouter(prefix="/rewards", tags=["Rewards"])


def _claim_status(client: RewardClient) -> ClaimStatusResponseDto:
    snapshot = client.claim_snapshot()
    if snapshot is None:
        raise InvalidStateError("No claim is in progress", details={"action": "claim_status"})

    return ClaimStatusResponseDto(
        state=client.state,
        progress=snapshot.progress,
        label=snapshot.label,
        status=snapshot.status,
        stats=client.rewards.stats,
        last_error=client.last_error
    )


@router.get("/stats", response_model=StatsResponseDto)
async def get_stats(client: RewardClient = Depends(get_reward_client)):
    """
    Refetch the signed-in user's stats from the reward service.
    A failure leaves the user signed in; call again to retry.
    """
    stats = await client.load_stats()
    return StatsResponseDto(stats=stats, can_claim_today=client.can_claim_today())


@router.post("/claim", response_model=ClaimStatusResponseDto, status_code=status.HTTP_202_ACCEPTED)
async def start_claim(client: RewardClient = Depends(get_reward_client)):
    """
    Start today's claim. The reward is committed when the progress
    sequence completes; poll GET /rewards/claim for progress.
    """
    await client.start_claim()
    return _claim_status(client)


@router.get("/claim", response_model=ClaimStatusResponseDto)
async def get_claim_status(client: RewardClient = Depends(get_reward_client)):
    """Current progress of the latest claim sequence."""
    return _claim_status(client)


@router.delete("/claim", response_model=CancelClaimResponseDto)
async def cancel_claim(client: RewardClient = Depends(get_reward_client)):
    """
    Stop the running claim sequence. Nothing is committed if the sequence
    had not finished; success is false once the commit has started.
    """
    cancelled = client.cancel_claim()
    return CancelClaimResponseDto(success=cancelled, state=client.state)
