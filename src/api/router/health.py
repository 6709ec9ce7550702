from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status

from src.core.dependencies import get_reward_client
from src.core.exceptions.base import ClientError
from src.core.service.reward_client import RewardClient
from src.infra.config.settings import settings

router = APIRouter()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(client: RewardClient = Depends(get_reward_client)):
    """
    Local liveness plus reachability of the reward service.
    The client itself is healthy even when the service is not.
    """
    try:
        await client.service_health()
        reward_service = "healthy"
    except ClientError as e:
        reward_service = f"unhealthy: {e.message}"

    return {
        "status": "ok" if reward_service == "healthy" else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "state": client.state.value,
        "services": {
            "rewardService": reward_service
        },
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    }
