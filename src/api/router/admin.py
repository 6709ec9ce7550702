from fastapi import APIRouter, Depends

from src.core.dependencies import get_reward_client
from src.core.logger.logger import logger
from src.core.service.gateway.models import AdminOverview
from src.core.service.reward_client import RewardClient

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/users", response_model=AdminOverview)
async def list_users(client: RewardClient = Depends(get_reward_client)):
    """
    Read-only listing of all users with aggregate counts, as reported by
    the reward service. Authorization is the service's concern.
    """
    overview = await client.get_admin_overview()
    logger.info(
        "Admin listing loaded",
        extra={"total_rewards": overview.total_rewards}
    )
    return overview
