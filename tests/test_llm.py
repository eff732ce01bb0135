"""Tests for the LLM classifier adapter and the classification strategy."""

import json
from unittest.mock import MagicMock

import pytest
from diskcache import Cache

from sentimenthub.core.errors import ClassificationError
from sentimenthub.core.models import OverallLabel, SentimentBucket
from sentimenthub.services.llm import (
    ClassificationAttempt,
    ClassificationStrategy,
    OpenAIClassifier,
    _safe_json_loads,
    choose_summary,
    format_candidates,
    parse_classification,
    select_exemplars,
)

from conftest import make_batch, make_snippet


def valid_payload(**overrides):
    payload = {
        "overallSentiment": "positive",
        "positiveRatio": 70,
        "negativeRatio": 10,
        "neutralRatio": 20,
        "summary": "Users are mostly happy.",
        "keyThemes": ["Speed", "Pricing"],
        "positiveIndices": [1, 2],
        "negativeIndices": [3],
        "neutralIndices": [],
    }
    payload.update(overrides)
    return payload


def fake_client(content):
    client = MagicMock()
    client.chat.completions.create.return_value = MagicMock(
        choices=[MagicMock(message=MagicMock(content=content))]
    )
    return client


@pytest.fixture
def candidates():
    return make_batch("Acme", positive=2, negative=1, neutral=3)


class TestSelectExemplars:
    def test_maps_one_based_indices(self, candidates):
        picked = select_exemplars([1, 3], candidates)
        assert [e.text for e in picked] == [candidates[0].text, candidates[2].text]

    def test_drops_out_of_range_duplicates_and_non_integers(self, candidates):
        picked = select_exemplars([0, 2, 2, 99, -1, "3", True, 2.0, None, 4], candidates)
        assert [e.text for e in picked] == [candidates[1].text, candidates[3].text]

    def test_caps_at_five(self):
        batch = make_batch("Acme", positive=8)
        picked = select_exemplars([8, 7, 6, 5, 4, 3, 2, 1], batch)
        assert len(picked) == 5
        assert picked[0].text == batch[7].text


class TestParseClassification:
    def test_valid_response(self, candidates):
        summary = parse_classification(valid_payload(), "Acme", candidates)
        assert summary.overall_label == OverallLabel.POSITIVE
        assert (summary.positive_ratio, summary.negative_ratio, summary.neutral_ratio) == (70, 10, 20)
        assert summary.classified_by == "llm"
        assert summary.key_themes == ["Speed", "Pricing"]
        assert len(summary.exemplars[SentimentBucket.POSITIVE]) == 2
        assert summary.exemplars[SentimentBucket.NEGATIVE][0].text == candidates[2].text

    def test_ratios_not_rederived_from_exemplars(self, candidates):
        summary = parse_classification(
            valid_payload(positiveRatio=10, negativeRatio=10, neutralRatio=80), "Acme", candidates
        )
        assert summary.positive_ratio == 10
        assert len(summary.exemplars[SentimentBucket.POSITIVE]) == 2

    def test_integral_float_ratio_accepted(self, candidates):
        summary = parse_classification(valid_payload(positiveRatio=70.0), "Acme", candidates)
        assert summary.positive_ratio == 70

    @pytest.mark.parametrize("field", ["overallSentiment", "positiveRatio", "summary", "neutralIndices"])
    def test_missing_field_rejected(self, candidates, field):
        payload = valid_payload()
        del payload[field]
        with pytest.raises(ClassificationError):
            parse_classification(payload, "Acme", candidates)

    @pytest.mark.parametrize("overrides", [
        {"overallSentiment": "ecstatic"},
        {"positiveRatio": "70"},
        {"positiveRatio": 70.5},
        {"positiveRatio": 120, "neutralRatio": -40},
        {"positiveRatio": 60},  # sums to 90
        {"keyThemes": "Speed"},
        {"positiveIndices": 1},
    ])
    def test_malformed_values_rejected(self, candidates, overrides):
        with pytest.raises(ClassificationError):
            parse_classification(valid_payload(**overrides), "Acme", candidates)

    def test_non_object_rejected(self, candidates):
        with pytest.raises(ClassificationError):
            parse_classification(["not", "an", "object"], "Acme", candidates)


class TestSafeJsonLoads:
    def test_plain(self):
        assert _safe_json_loads('{"a": 1}') == {"a": 1}

    def test_code_fence(self):
        assert _safe_json_loads('```json\n{"a": 1}\n```') == {"a": 1}

    def test_surrounding_prose(self):
        assert _safe_json_loads('Here you go: {"a": 1} hope it helps') == {"a": 1}

    def test_garbage(self):
        with pytest.raises(ClassificationError):
            _safe_json_loads("no json here")


def test_format_candidates_numbers_from_one():
    text = format_candidates([make_snippet("First comment about things", author="@a"),
                              make_snippet("Second comment about things")])
    assert text.startswith("[1] (Twitter - @a): First comment")
    assert "[2] (Twitter): Second comment" in text


class TestOpenAIClassifier:
    def test_classify_success(self, candidates):
        client = fake_client(json.dumps(valid_payload()))
        classifier = OpenAIClassifier(client=client, model="test-model", timeout=5,
                                      max_retries=1, use_cache=False)
        summary = classifier.classify("Acme", candidates)

        assert summary.classified_by == "llm"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["timeout"] == 5
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "Acme" in kwargs["messages"][1]["content"]

    def test_try_classify_reports_timeout_without_raising(self, candidates):
        client = MagicMock()
        client.chat.completions.create.side_effect = TimeoutError("timed out")
        classifier = OpenAIClassifier(client=client, max_retries=1, use_cache=False)

        attempt = classifier.try_classify("Acme", candidates)
        assert not attempt.ok
        assert "timed out" in attempt.error

    def test_try_classify_reports_malformed_response(self, candidates):
        classifier = OpenAIClassifier(client=fake_client('{"overallSentiment": "positive"}'),
                                      max_retries=1, use_cache=False)
        attempt = classifier.try_classify("Acme", candidates)
        assert not attempt.ok

    def test_cached_response_skips_api(self, candidates, tmp_path):
        client = fake_client(json.dumps(valid_payload()))
        with Cache(str(tmp_path)) as cache:
            classifier = OpenAIClassifier(client=client, max_retries=1, cache=cache)

            classifier.classify("Acme", candidates)
            classifier.classify("Acme", candidates)
        assert client.chat.completions.create.call_count == 1

    def test_malformed_reply_is_not_cached(self, candidates, tmp_path):
        with Cache(str(tmp_path)) as cache:
            bad = OpenAIClassifier(client=fake_client('{"overallSentiment": "positive"}'),
                                   max_retries=1, cache=cache)
            assert not bad.try_classify("Acme", candidates).ok
            assert len(cache) == 0

            good_client = fake_client(json.dumps(valid_payload()))
            good = OpenAIClassifier(client=good_client, max_retries=1, cache=cache)
            attempt = good.try_classify("Acme", candidates)

        assert attempt.ok
        assert good_client.chat.completions.create.call_count == 1


class StubPrimary:
    def __init__(self, attempt):
        self.attempt = attempt
        self.calls = 0

    def try_classify(self, subject, candidates):
        self.calls += 1
        return self.attempt


class TestClassificationStrategy:
    def test_uses_primary_when_it_succeeds(self, candidates):
        llm_summary = parse_classification(valid_payload(), "Acme", candidates)
        strategy = ClassificationStrategy(primary=StubPrimary(ClassificationAttempt(summary=llm_summary)))
        assert strategy.classify("Acme", candidates) is llm_summary

    def test_falls_back_on_failure(self, candidates):
        strategy = ClassificationStrategy(primary=StubPrimary(ClassificationAttempt(error="boom")))
        summary = strategy.classify("Acme", candidates)
        assert summary.classified_by == "keywords"
        assert summary.positive_ratio + summary.negative_ratio + summary.neutral_ratio == 100

    def test_no_primary_uses_fallback(self, candidates):
        summary = ClassificationStrategy(primary=None).classify("Acme", candidates)
        assert summary.classified_by == "keywords"

    def test_empty_candidates_skip_primary(self):
        primary = StubPrimary(ClassificationAttempt(error="unused"))
        summary = ClassificationStrategy(primary=primary).classify("Acme", [])
        assert primary.calls == 0
        assert summary.neutral_ratio == 100


def test_choose_summary_runs_fallback_only_when_needed(candidates):
    llm_summary = parse_classification(valid_payload(), "Acme", candidates)
    fallback = MagicMock(return_value="fallback")

    assert choose_summary(ClassificationAttempt(summary=llm_summary), fallback) is llm_summary
    fallback.assert_not_called()
    assert choose_summary(ClassificationAttempt(error="x"), fallback) == "fallback"
    assert choose_summary(None, fallback) == "fallback"
