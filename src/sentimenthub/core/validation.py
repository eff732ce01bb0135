"""Input validation for caller-supplied values."""

from typing import Union

from .constants import MonitorConstants, TrendConstants, ValidationConstants
from .errors import InputValidationError
from .models import Cadence


def validate_subject(subject: str) -> str:
    """Return the stripped subject name or raise InputValidationError."""
    if not isinstance(subject, str):
        raise InputValidationError("Subject must be a string")
    cleaned = subject.strip()
    if not cleaned:
        raise InputValidationError("Subject must not be empty")
    if len(cleaned) > ValidationConstants.MAX_SUBJECT_LENGTH:
        raise InputValidationError(
            f"Subject must be at most {ValidationConstants.MAX_SUBJECT_LENGTH} characters"
        )
    return cleaned


def validate_threshold(threshold: int) -> int:
    if isinstance(threshold, bool) or not isinstance(threshold, int):
        raise InputValidationError("Change threshold must be an integer")
    if not MonitorConstants.MIN_THRESHOLD <= threshold <= MonitorConstants.MAX_THRESHOLD:
        raise InputValidationError(
            f"Change threshold must be between {MonitorConstants.MIN_THRESHOLD} "
            f"and {MonitorConstants.MAX_THRESHOLD}"
        )
    return threshold


def validate_cadence(cadence: Union[str, Cadence]) -> Cadence:
    if isinstance(cadence, Cadence):
        return cadence
    try:
        return Cadence(str(cadence).lower())
    except ValueError:
        allowed = ", ".join(c.value for c in Cadence)
        raise InputValidationError(f"Cadence must be one of: {allowed}") from None


def validate_history_limit(limit: int) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InputValidationError("History limit must be an integer")
    if not 1 <= limit <= TrendConstants.MAX_HISTORY_LIMIT:
        raise InputValidationError(
            f"History limit must be between 1 and {TrendConstants.MAX_HISTORY_LIMIT}"
        )
    return limit
