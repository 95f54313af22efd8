"""
Field checks shared by the entity constructors.
"""

from typing import Any, Optional

from .exceptions import ValidationError


def require_text(value: Optional[str], field_name: str) -> str:
    """Reject ``None`` and blank strings."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} cannot be empty", details={"field": field_name})
    return value


def require_positive(value: Any, field_name: str) -> int:
    """Reject anything that is not a strictly positive integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{field_name} must be a positive number",
                              details={"field": field_name, "value": value})
    return value
