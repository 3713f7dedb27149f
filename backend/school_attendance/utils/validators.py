"""Validation utilities for the application."""
import re
from typing import Dict, List, Any

from school_attendance.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


class Validator:
    """Validation helper class."""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email or not isinstance(email, str):
            return False
        return bool(EMAIL_PATTERN.match(email))

    @staticmethod
    def validate_password(password: str) -> Dict[str, Any]:
        """Validate password strength."""
        errors = []

        if not password:
            errors.append("Password is required")
        elif len(password) < 6:
            errors.append("Password must be at least 6 characters long")
        elif len(password) > 128:
            errors.append("Password is too long")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def validate_name(name: str, field: str = "Name") -> Dict[str, Any]:
        """Validate a display name."""
        errors = []

        if not name or not isinstance(name, str) or not name.strip():
            errors.append(f"{field} is required")
        elif len(name.strip()) > 255:
            errors.append(f"{field} is too long")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def validate_required_fields(data: Dict, required_fields: List[str]) -> Dict[str, Any]:
        """Validate required fields in data."""
        errors = []

        for field in required_fields:
            value = data.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                errors.append(f"{field} is required")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def require(result: Dict[str, Any]) -> None:
        """Raise ValidationError when a validation result failed."""
        if not result["is_valid"]:
            raise ValidationError("; ".join(result["errors"]))

    @staticmethod
    def is_lookup_key(value) -> bool:
        """Whether a value can be matched against a stored text key.

        Empty strings, NUL bytes and lone surrogates never match a row and
        some drivers refuse to bind them.
        """
        if not isinstance(value, str) or not value or '\x00' in value:
            return False
        try:
            value.encode('utf-8')
        except UnicodeEncodeError:
            return False
        return True

    @staticmethod
    def to_int(value, field: str) -> int:
        """Coerce an id-like value to int or raise ValidationError."""
        if isinstance(value, bool):
            raise ValidationError(f"{field} must be an integer")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field} must be an integer") from None
