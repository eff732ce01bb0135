"""Tests for the keyword fallback classifier."""

import itertools

from sentimenthub.core.constants import KeywordConstants
from sentimenthub.core.keyword_classifier import KeywordClassifier, bucket_for_text
from sentimenthub.core.models import OverallLabel, SentimentBucket

from conftest import make_batch, make_snippet


class TestBucketForText:
    def test_positive_only(self):
        assert bucket_for_text("I would RECOMMEND it to anyone") == SentimentBucket.POSITIVE

    def test_negative_only(self):
        assert bucket_for_text("Way too expensive for what it does") == SentimentBucket.NEGATIVE

    def test_both_is_neutral(self):
        assert bucket_for_text("Great features but the pricing is bad") == SentimentBucket.NEUTRAL

    def test_none_is_neutral(self):
        assert bucket_for_text("Released on Tuesday in three regions") == SentimentBucket.NEUTRAL

    def test_substring_match(self):
        # "bestseller" contains "best"
        assert bucket_for_text("It became a bestseller overnight") == SentimentBucket.POSITIVE


class TestKeywordClassifier:
    def test_counts_and_label(self):
        summary = KeywordClassifier().classify("Acme", make_batch("Acme", positive=3, negative=1))
        assert (summary.positive_ratio, summary.negative_ratio, summary.neutral_ratio) == (75, 25, 0)
        assert summary.overall_label == OverallLabel.POSITIVE
        assert summary.classified_by == "keywords"
        assert summary.key_themes == KeywordConstants.FALLBACK_THEMES

    def test_exemplars_capped_at_five_in_input_order(self):
        batch = make_batch("Acme", positive=7, neutral=2)
        summary = KeywordClassifier().classify("Acme", batch)
        positives = summary.exemplars[SentimentBucket.POSITIVE]
        assert len(positives) == 5
        assert [e.text for e in positives] == [s.text for s in batch[:5]]
        assert len(summary.exemplars[SentimentBucket.NEUTRAL]) == 2
        assert summary.exemplars[SentimentBucket.NEGATIVE] == []

    def test_deterministic(self):
        batch = make_batch("Acme", positive=2, negative=2, neutral=3)
        assert KeywordClassifier().classify("Acme", batch) == KeywordClassifier().classify("Acme", batch)

    def test_exemplar_keeps_source_and_author(self):
        snippet = make_snippet("Absolutely fantastic support team, thanks", author="@someone",
                               url="https://x.com/someone/status/1")
        summary = KeywordClassifier().classify("Acme", [snippet])
        exemplar = summary.exemplars[SentimentBucket.POSITIVE][0]
        assert exemplar.author == "@someone"
        assert exemplar.source_label == "Twitter"
        assert exemplar.url == "https://x.com/someone/status/1"

    def test_empty_candidates(self):
        summary = KeywordClassifier().classify("Acme", [])
        assert (summary.positive_ratio, summary.negative_ratio, summary.neutral_ratio) == (0, 0, 100)
        assert summary.overall_label == OverallLabel.NEUTRAL


def buckets_by_text(summary):
    return {e.text: bucket for bucket, exemplars in summary.exemplars.items() for e in exemplars}


def test_buckets_independent_of_order():
    texts = [
        "Great!!" * 5,
        "bad bad bad, would not buy again",
        "ok, nothing much to say here",
        "fine product for the price asked",
        "excellent work from the whole team",
    ]
    snippets = [make_snippet(t) for t in texts]
    classifier = KeywordClassifier()
    expected = {
        texts[0]: SentimentBucket.POSITIVE,
        texts[1]: SentimentBucket.NEGATIVE,
        texts[2]: SentimentBucket.NEUTRAL,
        texts[3]: SentimentBucket.NEUTRAL,
        texts[4]: SentimentBucket.POSITIVE,
    }

    for ordering in itertools.permutations(snippets):
        summary = classifier.classify("Acme", list(ordering))
        assert (summary.positive_ratio, summary.negative_ratio, summary.neutral_ratio) == (40, 20, 40)
        assert summary.overall_label == OverallLabel.NEUTRAL
        assert buckets_by_text(summary) == expected
