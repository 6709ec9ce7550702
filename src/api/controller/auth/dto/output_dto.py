"""
Output DTOs for session and authentication API endpoints.
"""

from pydantic import BaseModel, Field
from typing import Optional

from src.core.service.auth.models.session import AppState, Identity


class AppStateResponseDto(BaseModel):
    """DTO describing which view the presentation layer should show."""

    state: AppState = Field(..., description="Current client state")
    view: str = Field(..., description="View to render: loading, login, pin, dashboard, claim or admin")
    identity: Optional[Identity] = Field(None, description="Signed-in user, if any")
    busy: bool = Field(False, description="A login or PIN submission is pending")
    last_error: Optional[str] = Field(None, alias="lastError", description="Last user-displayable error")

    class Config:
        populate_by_name = True


class AuthResponseDto(BaseModel):
    """DTO for auth step results."""

    success: bool = Field(True, description="Step succeeded")
    state: AppState = Field(..., description="State after the step")
    identity: Optional[Identity] = Field(None, description="Signed-in user after PIN verification")


class LogoutResponseDto(BaseModel):
    """DTO for logout response."""

    success: bool = Field(True, description="Logout success status")
    message: str = Field(default="Successfully logged out", description="Logout message")
    state: AppState = Field(AppState.LOGGED_OUT, description="State after logout")
