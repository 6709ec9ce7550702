from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AppState(str, Enum):
    """Process-wide client state; decides which view is active"""
    LOADING = "loading"
    LOGGED_OUT = "logged_out"
    AWAITING_PIN = "awaiting_pin"
    AUTHENTICATED = "authenticated"
    CLAIM_IN_PROGRESS = "claim_in_progress"


class Identity(BaseModel):
    """Authenticated user record, as returned by PIN verification"""
    id: str
    phone: str
    name: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")
    last_login: Optional[str] = Field(None, alias="lastLogin")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "user_14155550123",
                "phone": "+14155550123",
                "name": "Alice",
                "createdAt": "2024-01-01T09:00:00Z",
                "lastLogin": "2024-01-02T08:30:00Z"
            }
        }


class TransientCredentials(BaseModel):
    """Phone and password held between the login and PIN steps. Never persisted."""
    phone: str
    password: str = Field(..., repr=False)
