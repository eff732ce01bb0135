"""Aggregation of a classified batch into a stamped summary."""

from dataclasses import replace
from typing import Dict, List, Sequence

from .models import SentimentSummary, Snippet


def distinct_sources(candidates: Sequence[Snippet]) -> List[str]:
    return list(dict.fromkeys(s.source_label for s in candidates))


class Aggregator:
    """Runs the classifier and stamps the batch counts onto its summary.

    ``source_breakdown`` is the raw per-platform retrieval volume from before
    deduplication, while ratios and exemplars come from the deduplicated
    candidates. The two are not reconciled.
    """

    def __init__(self, classifier):
        self.classifier = classifier

    def aggregate(self, subject: str, candidates: Sequence[Snippet],
                  source_breakdown: Dict[str, int]) -> SentimentSummary:
        summary = self.classifier.classify(subject, candidates)
        return replace(
            summary,
            total_analyzed=len(candidates),
            source_breakdown=dict(source_breakdown),
            sources=distinct_sources(candidates),
        )
