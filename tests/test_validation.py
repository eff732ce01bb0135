"""Tests for input validation."""

import pytest

from sentimenthub.core.errors import InputValidationError
from sentimenthub.core.models import Cadence
from sentimenthub.core.validation import (
    validate_cadence,
    validate_history_limit,
    validate_subject,
    validate_threshold,
)


def test_subject_is_stripped():
    assert validate_subject("  ChatGPT ") == "ChatGPT"


@pytest.mark.parametrize("subject", ["", "   ", "x" * 201, None])
def test_bad_subjects(subject):
    with pytest.raises(InputValidationError):
        validate_subject(subject)


def test_subject_at_max_length():
    assert validate_subject("x" * 200) == "x" * 200


@pytest.mark.parametrize("threshold", [5, 20, 100])
def test_threshold_in_range(threshold):
    assert validate_threshold(threshold) == threshold


@pytest.mark.parametrize("threshold", [4, 101, 0, -5, True, 20.5, "20"])
def test_threshold_out_of_range(threshold):
    with pytest.raises(InputValidationError):
        validate_threshold(threshold)


def test_cadence():
    assert validate_cadence("Weekly") == Cadence.WEEKLY
    assert validate_cadence(Cadence.DAILY) == Cadence.DAILY
    with pytest.raises(InputValidationError):
        validate_cadence("hourly")


def test_history_limit():
    assert validate_history_limit(30) == 30
    for bad in (0, 366, "10"):
        with pytest.raises(InputValidationError):
            validate_history_limit(bad)
