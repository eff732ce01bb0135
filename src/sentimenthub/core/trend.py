"""Change detection between consecutive sentiment scores."""

from typing import Optional

from .models import ChangeDirection, ChangeEvent


def compute_change(previous_score: Optional[int], current_score: int, threshold: int,
                   subject: str = "") -> Optional[ChangeEvent]:
    """Return a ChangeEvent when the score moved by at least ``threshold`` points.

    No event without a previous score. A magnitude equal to the threshold
    counts as significant.
    """
    if previous_score is None:
        return None
    magnitude = abs(current_score - previous_score)
    if magnitude < threshold:
        return None
    direction = ChangeDirection.UP if current_score > previous_score else ChangeDirection.DOWN
    return ChangeEvent(
        subject=subject,
        previous_score=previous_score,
        current_score=current_score,
        direction=direction,
        magnitude=magnitude,
    )
