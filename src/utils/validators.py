"""
Sentinel Discord Bot - Input Validators
=======================================

Validation for identifiers that come from outside the gateway:
persisted records and operator-supplied values.

Features:
- Discord ID validation with range checking
- Reason text truncation for persisted records

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Any, Optional


class ValidationError(Exception):
    """Custom exception for validation failures"""

    pass


class Validators:
    """Input validation utilities"""

    # Discord snowflakes are 17-19 digits
    DISCORD_ID_MIN = 10000000000000000
    DISCORD_ID_MAX = 9999999999999999999

    DB_REASON_MAX = 500

    @staticmethod
    def validate_discord_id(value: Any, field_name: str = "user_id") -> int:
        """
        Validate and normalize a Discord ID.

        Args:
            value: The ID to validate (int or numeric string).
            field_name: Name of field for error messages.

        Returns:
            Valid Discord ID as integer.

        Raises:
            ValidationError: If the ID is malformed or out of range.
        """
        if isinstance(value, str):
            value = value.strip()
            if not value.isdigit():
                raise ValidationError(f"{field_name} must be numeric, got: {value[:30]}")
            value = int(value)

        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(
                f"{field_name} must be an integer, got type: {type(value).__name__}"
            )

        if value < Validators.DISCORD_ID_MIN or value > Validators.DISCORD_ID_MAX:
            raise ValidationError(f"{field_name} out of valid Discord ID range: {value}")

        return value

    @staticmethod
    def sanitize_reason(reason: Optional[str]) -> Optional[str]:
        """Trim a reason string to the stored maximum."""
        if reason is None:
            return None
        reason = reason.strip()
        if len(reason) > Validators.DB_REASON_MAX:
            reason = reason[:Validators.DB_REASON_MAX - 3] + "..."
        return reason or None


def validate_discord_id(value: Any, field_name: str = "user_id") -> int:
    """Module-level shortcut for Validators.validate_discord_id."""
    return Validators.validate_discord_id(value, field_name)


__all__ = [
    "ValidationError",
    "Validators",
    "validate_discord_id",
]
