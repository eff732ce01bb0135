"""Data models for SentimentHub."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Dict, Any


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, the form every stored timestamp uses."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Platform(Enum):
    TWITTER = "twitter"
    REDDIT = "reddit"
    NEWS = "news"
    WEB = "web"


class SentimentBucket(Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class OverallLabel(Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    MIXED = "mixed"


class Cadence(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ChangeDirection(Enum):
    UP = "up"
    DOWN = "down"


class NotificationChannel(Enum):
    EMAIL = "email"
    IN_APP = "in_app"


class MonitorState(Enum):
    IDLE = "idle"
    DUE = "due"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class RunStatus(Enum):
    COMPLETED = "completed"
    NO_DATA = "no_data"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Snippet:
    """One observed text unit from a retrieval source."""
    text: str
    source_label: str
    platform: Platform
    author: Optional[str] = None
    url: Optional[str] = None
    date: Optional[str] = None


@dataclass(frozen=True)
class ClassifiedSnippet:
    """A snippet with its sentiment bucket."""
    snippet: Snippet
    bucket: SentimentBucket


@dataclass(frozen=True)
class Exemplar:
    """Representative comment shown for a sentiment bucket."""
    text: str
    source_label: str
    author: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_snippet(cls, snippet: Snippet) -> "Exemplar":
        return cls(text=snippet.text, source_label=snippet.source_label,
                   author=snippet.author, url=snippet.url)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "source": self.source_label,
            "author": self.author,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Exemplar":
        return cls(text=data["text"], source_label=data.get("source", ""),
                   author=data.get("author"), url=data.get("url"))


def empty_exemplars() -> Dict[SentimentBucket, List[Exemplar]]:
    return {bucket: [] for bucket in SentimentBucket}


@dataclass(frozen=True)
class SentimentSummary:
    """One aggregation result for one subject at one point in time."""
    subject: str
    overall_label: OverallLabel
    positive_ratio: int
    negative_ratio: int
    neutral_ratio: int
    narrative_summary: str
    key_themes: List[str]
    exemplars: Dict[SentimentBucket, List[Exemplar]] = field(default_factory=empty_exemplars)
    total_analyzed: int = 0
    source_breakdown: Dict[str, int] = field(default_factory=dict)
    sources: List[str] = field(default_factory=list)
    classified_by: str = "keywords"

    @property
    def overall_score(self) -> int:
        """Single scalar used for trend comparison: the positive share."""
        return self.positive_ratio

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject": self.subject,
            "overall_label": self.overall_label.value,
            "positive_ratio": self.positive_ratio,
            "negative_ratio": self.negative_ratio,
            "neutral_ratio": self.neutral_ratio,
            "narrative_summary": self.narrative_summary,
            "key_themes": list(self.key_themes),
            "exemplars": {
                bucket.value: [e.to_dict() for e in self.exemplars.get(bucket, [])]
                for bucket in SentimentBucket
            },
            "total_analyzed": self.total_analyzed,
            "source_breakdown": dict(self.source_breakdown),
            "sources": list(self.sources),
            "classified_by": self.classified_by,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SentimentSummary":
        exemplars = empty_exemplars()
        for bucket in SentimentBucket:
            exemplars[bucket] = [Exemplar.from_dict(e) for e in data.get("exemplars", {}).get(bucket.value, [])]
        return cls(
            subject=data["subject"],
            overall_label=OverallLabel(data["overall_label"]),
            positive_ratio=int(data["positive_ratio"]),
            negative_ratio=int(data["negative_ratio"]),
            neutral_ratio=int(data["neutral_ratio"]),
            narrative_summary=data.get("narrative_summary", ""),
            key_themes=list(data.get("key_themes", [])),
            exemplars=exemplars,
            total_analyzed=int(data.get("total_analyzed", 0)),
            source_breakdown=dict(data.get("source_breakdown", {})),
            sources=list(data.get("sources", [])),
            classified_by=data.get("classified_by", "keywords"),
        )


@dataclass(frozen=True)
class TrendPoint:
    """One historical snapshot of a subject's sentiment."""
    subject: str
    positive_ratio: int
    negative_ratio: int
    neutral_ratio: int
    overall_score: int
    platform_counts: Dict[str, int]
    total_count: int
    recorded_at: datetime
    id: Optional[int] = None
    analysis_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "subject": self.subject,
            "positive_ratio": self.positive_ratio,
            "negative_ratio": self.negative_ratio,
            "neutral_ratio": self.neutral_ratio,
            "overall_score": self.overall_score,
            "platform_counts": dict(self.platform_counts),
            "total_count": self.total_count,
            "analysis_id": self.analysis_id,
            "recorded_at": self.recorded_at.isoformat(),
        }


@dataclass
class MonitorSubscription:
    """A user's standing request to repeatedly analyze one subject."""
    owner: str
    subject: str
    id: Optional[int] = None
    active: bool = True
    cadence: Cadence = Cadence.DAILY
    change_threshold_percent: int = 20
    notify_on_significant_change: bool = True
    notify_by_email: bool = False
    notify_in_app: bool = True
    last_run_at: Optional[datetime] = None
    last_score: Optional[int] = None
    last_analysis_id: Optional[int] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "owner": self.owner,
            "subject": self.subject,
            "active": self.active,
            "cadence": self.cadence.value,
            "change_threshold_percent": self.change_threshold_percent,
            "notify_on_significant_change": self.notify_on_significant_change,
            "notify_by_email": self.notify_by_email,
            "notify_in_app": self.notify_in_app,
            "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
            "last_score": self.last_score,
            "last_analysis_id": self.last_analysis_id,
        }


@dataclass(frozen=True)
class ChangeEvent:
    """A threshold crossing between two consecutive scores."""
    subject: str
    previous_score: int
    current_score: int
    direction: ChangeDirection
    magnitude: int


@dataclass
class AnalysisRecord:
    """A saved summary owned by one user."""
    owner: str
    summary: SentimentSummary
    id: Optional[int] = None
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class Notification:
    """An in-app notification row."""
    owner: str
    title: str
    message: str
    kind: str = "sentiment_change"
    id: Optional[int] = None
    analysis_id: Optional[int] = None
    subscription_id: Optional[int] = None
    read: bool = False
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class RetrievalResult:
    """Merged output of one multi-source retrieval."""
    snippets: List[Snippet]
    source_breakdown: Dict[str, int]
    failed_sources: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.snippets)


@dataclass
class AnalysisResult:
    """Outcome of one interactive analysis."""
    subject: str
    summary: Optional[SentimentSummary] = None
    record_id: Optional[int] = None
    save_error: Optional[str] = None

    @property
    def has_data(self) -> bool:
        return self.summary is not None


@dataclass
class RunOutcome:
    """Result of processing one subscription during a sweep."""
    subscription_id: Optional[int]
    subject: str
    state: MonitorState
    status: RunStatus
    score: Optional[int] = None
    change: Optional[ChangeEvent] = None
    notified: List[NotificationChannel] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status in (RunStatus.COMPLETED, RunStatus.NO_DATA, RunStatus.SKIPPED)


@dataclass
class SweepReport:
    """Per-subscription outcomes of one monitoring sweep."""
    outcomes: List[RunOutcome] = field(default_factory=list)

    def count(self, status: RunStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def failures(self) -> List[RunOutcome]:
        return [o for o in self.outcomes if o.status == RunStatus.FAILED]

    def to_dict(self) -> Dict[str, Any]:
        return {status.value: self.count(status) for status in RunStatus}
