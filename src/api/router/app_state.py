from fastapi import APIRouter, Depends, Query, status

from src.api.controller.auth.dto.output_dto import AppStateResponseDto
from src.core.dependencies import get_reward_client
from src.core.service.reward_client import RewardClient

router = APIRouter(prefix="/app", tags=["App"])


@router.get("/state", response_model=AppStateResponseDto)
async def get_state(
    admin: bool = Query(False, description="Force the read-only admin view"),
    client: RewardClient = Depends(get_reward_client)
):
    """
    Which view to render. ``?admin=true`` selects the admin listing without
    changing the session state.
    """
    return AppStateResponseDto(
        state=client.state,
        view=client.view(admin=admin),
        identity=client.identity,
        busy=client.auth.is_busy,
        last_error=client.last_error
    )


@router.delete("/error", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_error(client: RewardClient = Depends(get_reward_client)):
    """Dismiss the last displayed error."""
    client.clear_error()
