from typing import Any, Dict, Optional
from fastapi import status


class ClientErrorCode:
    """Standard error codes for the reward client"""

    INVALID_INPUT = "INVALID_INPUT"
    AUTH_FAILED = "AUTH_FAILED"
    FETCH_FAILED = "FETCH_FAILED"
    CLAIM_FAILED = "CLAIM_FAILED"
    ALREADY_CLAIMED = "ALREADY_CLAIMED"
    TRANSITION_IN_PROGRESS = "TRANSITION_IN_PROGRESS"
    INVALID_STATE = "INVALID_STATE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ClientError(Exception):
    """
    Base error raised by the client core.
    Carries a user-displayable message; the HTTP layer turns it into an error envelope.
    """

    code = ClientErrorCode.INTERNAL_ERROR
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "status_code": self.status_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(ClientError):
    """Malformed local input; never reaches the network"""
    code = ClientErrorCode.INVALID_INPUT
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Validation error"


class AuthError(ClientError):
    """Credentials or PIN rejected by the reward service"""
    code = ClientErrorCode.AUTH_FAILED
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Login failed. Please try again."


class FetchError(ClientError):
    code = ClientErrorCode.FETCH_FAILED
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Failed to load data. Please try again."


class ClaimError(ClientError):
    """Reward commit failed; today's eligibility is not consumed"""
    code = ClientErrorCode.CLAIM_FAILED
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Failed to collect reward. Please try again."


class AlreadyClaimedError(ClientError):
    code = ClientErrorCode.ALREADY_CLAIMED
    status_code = status.HTTP_409_CONFLICT
    default_message = "You have already collected your reward today! Come back tomorrow."


class TransitionInProgressError(ClientError):
    code = ClientErrorCode.TRANSITION_IN_PROGRESS
    status_code = status.HTTP_409_CONFLICT
    default_message = "Another request is still in progress."


class InvalidStateError(ClientError):
    code = ClientErrorCode.INVALID_STATE
    status_code = status.HTTP_409_CONFLICT
    default_message = "This action is not available right now."
