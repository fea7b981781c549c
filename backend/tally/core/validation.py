"""
Tally Backend - Required Field Validation
==========================================

What:  Reports which required values of a request are missing or empty.
Who:   Called by CrudService.create before any database access, and by the
       auth service for join/login bodies.

Empty means None or a blank string. 0 and False are real values.
"""

from typing import Any, List, Mapping, Optional

from tally.exceptions import ValidationError


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def missing_fields(params: Mapping[str, Any]) -> List[str]:
    """Names of the entries in `params` whose value is empty, in order."""
    return [name for name, value in params.items() if is_empty(value)]


def get_validation_error(
    params: Mapping[str, Any],
    path: str = "",
) -> Optional[ValidationError]:
    """
    Check that every value in `params` is present.

    Args:
        params: Mapping of required field name → submitted value
        path:   Request path, prefixed to the message so the client can tell
                which endpoint rejected the body

    Returns:
        A ValidationError with reason "missing_fields" and the offending
        field names, or None when every field is present.
    """
    missing = missing_fields(params)
    if not missing:
        return None

    prefix = f"{path} " if path else ""
    return ValidationError(
        message=f"{prefix}missing required fields: {', '.join(missing)}",
        fields=missing,
        reason="missing_fields",
    )
