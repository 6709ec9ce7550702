"""
Local input validation for the login and PIN steps.
Runs before any network call.
"""

import re
from typing import Optional, Tuple

from src.core.exceptions.base import ValidationError

PHONE_PATTERN = re.compile(r"\+?[1-9][0-9]{1,14}")
PIN_PATTERN = re.compile(r"[0-9]{6}")
PIN_LENGTH = 6


class CredentialValidator:
    """Validators for phone, password and PIN input."""

    @staticmethod
    def normalize_phone(phone: Optional[str]) -> str:
        """Drop all whitespace, as users type '+1 415 555 0123'."""
        return re.sub(r"\s", "", phone or "")

    @staticmethod
    def validate_phone(phone: str) -> Tuple[bool, str]:
        """
        Validate international phone format: optional '+', 2-15 digits, first digit 1-9.
        Returns: (is_valid, error_message)
        """
        if not phone:
            return False, "Please fill in all fields"

        if not PHONE_PATTERN.fullmatch(phone):
            return False, "Please enter a valid phone number"

        return True, ""

    @staticmethod
    def validate_pin(pin: Optional[str]) -> Tuple[bool, str]:
        if not pin or len(pin) != PIN_LENGTH or not PIN_PATTERN.fullmatch(pin):
            return False, f"Please enter a complete {PIN_LENGTH}-digit PIN"
        return True, ""

    @classmethod
    def validate_login(cls, phone: Optional[str], password: Optional[str]) -> str:
        """
        Validate the login form.
        Returns the normalized phone; raises ValidationError otherwise.
        """
        normalized = cls.normalize_phone(phone)

        if not normalized or not password:
            raise ValidationError(
                "Please fill in all fields",
                details={"field": "phone" if not normalized else "password"}
            )

        is_valid, error_msg = cls.validate_phone(normalized)
        if not is_valid:
            raise ValidationError(error_msg, details={"field": "phone"})

        return normalized

    @classmethod
    def validate_pin_input(cls, pin: Optional[str]) -> str:
        is_valid, error_msg = cls.validate_pin(pin)
        if not is_valid:
            raise ValidationError(error_msg, details={"field": "pin"})
        return pin
