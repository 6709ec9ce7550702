"""
Authentication controller: login, PIN, back and logout steps.
Client errors propagate to the global error handler.
"""

from fastapi import APIRouter, Depends

from src.api.controller.auth.dto.input_dto import LoginRequestDto, PinRequestDto
from src.api.controller.auth.dto.output_dto import AuthResponseDto, LogoutResponseDto
from src.core.dependencies import get_reward_client
from src.core.logger.logger import get_logger
from src.core.service.reward_client import RewardClient

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=AuthResponseDto)
async def login(
    request: LoginRequestDto,
    client: RewardClient = Depends(get_reward_client)
):
    """
    Submit phone and password.

    On success the client moves to the PIN step; the credentials stay in
    memory only until the PIN step ends.
    """
    state = await client.submit_login(request.phone, request.password)
    return AuthResponseDto(state=state)


@router.post("/pin", response_model=AuthResponseDto)
async def verify_pin(
    request: PinRequestDto,
    client: RewardClient = Depends(get_reward_client)
):
    """
    Submit the 6-digit PIN for the phone from the login step.
    On success the session is stored and the user is signed in.
    """
    identity = await client.submit_pin(request.pin)
    return AuthResponseDto(state=client.state, identity=identity)


@router.post("/back", response_model=AuthResponseDto)
async def back(client: RewardClient = Depends(get_reward_client)):
    """Leave the PIN step and return to login."""
    state = client.back()
    return AuthResponseDto(state=state)


@router.post("/logout", response_model=LogoutResponseDto)
async def logout(client: RewardClient = Depends(get_reward_client)):
    """Cancel any running claim, clear the stored session and return to login."""
    state = await client.logout()
    return LogoutResponseDto(state=state)
