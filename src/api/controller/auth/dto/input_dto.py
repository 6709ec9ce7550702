"""
Input DTOs for authentication API endpoints.
Format checks live in the client core so they apply to every caller.
"""

from pydantic import BaseModel, Field


class LoginRequestDto(BaseModel):
    """DTO for the phone + password step."""

    phone: str = Field(..., max_length=32, description="Phone number in international format")
    password: str = Field(..., max_length=256, description="Account password")

    class Config:
        json_schema_extra = {
            "example": {
                "phone": "+14155550123",
                "password": "correct horse battery staple"
            }
        }


class PinRequestDto(BaseModel):
    """DTO for the 6-digit PIN step."""

    pin: str = Field(..., max_length=16, description="6-digit PIN code")

    class Config:
        json_schema_extra = {
            "example": {"pin": "123456"}
        }
