"""Ratio, label and narrative helpers shared by the classifiers."""

import math
from typing import Tuple

from .constants import ClassifierConstants
from .models import OverallLabel


def _round_half_up(x: float) -> int:
    """Round .5 away from zero for non-negative values."""
    return int(math.floor(x + 0.5))


def compute_ratios(positive: int, negative: int, total: int) -> Tuple[int, int, int]:
    """Integer percentages that always sum to 100.

    Rounding error is absorbed by the neutral share.
    """
    denom = max(total, 1)
    pos = _round_half_up(100.0 * positive / denom)
    neg = _round_half_up(100.0 * negative / denom)
    return pos, neg, 100 - pos - neg


def label_from_ratios(positive_ratio: int, negative_ratio: int) -> OverallLabel:
    """Overall label; cutoffs are exclusive."""
    if positive_ratio > ClassifierConstants.DOMINANT_RATIO:
        return OverallLabel.POSITIVE
    if negative_ratio > ClassifierConstants.DOMINANT_RATIO:
        return OverallLabel.NEGATIVE
    if positive_ratio > ClassifierConstants.MIXED_RATIO or negative_ratio > ClassifierConstants.MIXED_RATIO:
        return OverallLabel.MIXED
    return OverallLabel.NEUTRAL


_LEANING = {
    OverallLabel.POSITIVE: "leans positive",
    OverallLabel.NEGATIVE: "leans negative",
    OverallLabel.MIXED: "is polarized",
    OverallLabel.NEUTRAL: "is broadly neutral",
}

_RECEPTION = {
    OverallLabel.POSITIVE: "good",
    OverallLabel.NEGATIVE: "poor",
}


def build_narrative(subject: str, label: OverallLabel, positive_ratio: int,
                    negative_ratio: int, neutral_ratio: int, total: int) -> str:
    """Template narrative used when no language model wrote one."""
    reception = _RECEPTION.get(label, "moderate")
    return (
        f"Based on {total} user comments, overall sentiment about {subject} {_LEANING[label]}. "
        f"Positive comments make up {positive_ratio}%, negative {negative_ratio}% "
        f"and neutral {neutral_ratio}%.\n\n"
        "Users mostly discuss product features, day-to-day experience and value for money. "
        "Praise centers on core capabilities, while criticism tends to mention price, "
        "stability or limits in specific use cases.\n\n"
        f"Overall, {subject} is receiving {reception} feedback; the concrete issues users "
        "raise are worth following up on."
    )
