"""Deterministic keyword classifier used when the language model is unavailable."""

import logging
from typing import List, Sequence

from .constants import ClassifierConstants, KeywordConstants
from .models import ClassifiedSnippet, Exemplar, SentimentBucket, SentimentSummary, Snippet, empty_exemplars
from .scoring import build_narrative, compute_ratios, label_from_ratios

logger = logging.getLogger(__name__)


def bucket_for_text(text: str) -> SentimentBucket:
    """Positive-only or negative-only keyword hits decide; anything else is neutral."""
    lowered = text.lower()
    has_positive = any(k in lowered for k in KeywordConstants.POSITIVE_KEYWORDS)
    has_negative = any(k in lowered for k in KeywordConstants.NEGATIVE_KEYWORDS)
    if has_positive and not has_negative:
        return SentimentBucket.POSITIVE
    if has_negative and not has_positive:
        return SentimentBucket.NEGATIVE
    return SentimentBucket.NEUTRAL


def classify_snippets(candidates: Sequence[Snippet]) -> List[ClassifiedSnippet]:
    return [ClassifiedSnippet(snippet=s, bucket=bucket_for_text(s.text)) for s in candidates]


class KeywordClassifier:
    """Rule-based sentiment classifier with no external calls."""

    name = "keywords"

    def classify(self, subject: str, candidates: Sequence[Snippet]) -> SentimentSummary:
        classified = classify_snippets(candidates)

        counts = {bucket: 0 for bucket in SentimentBucket}
        exemplars = empty_exemplars()
        for item in classified:
            counts[item.bucket] += 1
            if len(exemplars[item.bucket]) < ClassifierConstants.MAX_EXEMPLARS:
                exemplars[item.bucket].append(Exemplar.from_snippet(item.snippet))

        pos, neg, neu = compute_ratios(
            counts[SentimentBucket.POSITIVE], counts[SentimentBucket.NEGATIVE], len(candidates)
        )
        label = label_from_ratios(pos, neg)
        logger.debug(f"Keyword classification for '{subject}': {pos}/{neg}/{neu} -> {label.value}")

        return SentimentSummary(
            subject=subject,
            overall_label=label,
            positive_ratio=pos,
            negative_ratio=neg,
            neutral_ratio=neu,
            narrative_summary=build_narrative(subject, label, pos, neg, neu, len(candidates)),
            key_themes=list(KeywordConstants.FALLBACK_THEMES),
            exemplars=exemplars,
            classified_by=self.name,
        )
