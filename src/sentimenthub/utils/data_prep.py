"""Data preparation for export."""

import datetime
import json
from typing import Any, Dict, List, Optional

from ..core.constants import FileConstants
from ..core.models import SentimentSummary, TrendPoint


def prepare_export(summary: SentimentSummary, trend: Optional[List[TrendPoint]] = None,
                   record_id: Optional[int] = None) -> Dict[str, Any]:
    """Prepare an analysis (and optionally its trend history) for JSON export."""
    export_data = {
        "subject": summary.subject,
        "analysis_id": record_id,
        "summary": {
            "overall_sentiment": summary.overall_label.value,
            "positive": summary.positive_ratio,
            "negative": summary.negative_ratio,
            "neutral": summary.neutral_ratio,
            "total_analyzed": summary.total_analyzed,
            "classified_by": summary.classified_by,
            "detailed_summary": summary.narrative_summary,
        },
        "key_themes": list(summary.key_themes),
        "exemplars": summary.to_dict()["exemplars"],
        "source_breakdown": dict(summary.source_breakdown),
        "sources": list(summary.sources),
        "metadata": {
            "export_timestamp": None,  # set by export_to_json
            "version": FileConstants.EXPORT_VERSION,
        },
    }
    if trend is not None:
        export_data["trend"] = [p.to_dict() for p in trend]
    return export_data


def export_to_json(data: Dict[str, Any], filename: str) -> None:
    """Export data to JSON file."""
    data.setdefault("metadata", {})["export_timestamp"] = datetime.datetime.now().isoformat()

    with open(filename, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
