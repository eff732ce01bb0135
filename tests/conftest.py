"""Shared fixtures for SentimentHub tests."""

from datetime import datetime, timedelta

import pytest

from sentimenthub.app import SentimentHub
from sentimenthub.core.errors import RetrievalError
from sentimenthub.core.models import Platform, RetrievalResult, Snippet
from sentimenthub.services.llm import ClassificationStrategy
from sentimenthub.services.notifier import NotificationService
from sentimenthub.services.storage import in_memory_stores

POSITIVE_TEXT = "I love {subject}, it is a great tool for everyday work and coding."
NEGATIVE_TEXT = "{subject} is terrible lately, the worst release so far in my view."
NEUTRAL_TEXT = "{subject} shipped a new version today with several interface changes."

LABELS = {
    Platform.TWITTER: "Twitter",
    Platform.REDDIT: "Reddit",
    Platform.NEWS: "techcrunch.com",
    Platform.WEB: "medium.com",
}


def make_snippet(text, platform=Platform.TWITTER, author=None, url=None):
    return Snippet(text=text, source_label=LABELS[platform], platform=platform, author=author, url=url)


def make_batch(subject, positive=0, negative=0, neutral=0, platform=Platform.TWITTER):
    """Distinct snippets with the requested keyword sentiment mix."""
    snippets = []
    for template, n in ((POSITIVE_TEXT, positive), (NEGATIVE_TEXT, negative), (NEUTRAL_TEXT, neutral)):
        for i in range(n):
            snippets.append(make_snippet(f"#{i} " + template.format(subject=subject), platform))
    return snippets


def retrieval_of(snippets):
    breakdown = {p.value: 0 for p in Platform}
    for s in snippets:
        breakdown[s.platform.value] += 1
    return RetrievalResult(snippets=list(snippets), source_breakdown=breakdown)


class StubManager:
    """Retrieval stand-in returning canned snippets per subject.

    A response is a list of snippets or an exception instance to raise.
    Queued responses are consumed first, one per call.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.queued = {}
        self.calls = []

    def set(self, subject, value):
        self.responses[subject] = value

    def queue(self, subject, *values):
        self.queued.setdefault(subject, []).extend(values)

    def search(self, subject):
        self.calls.append(subject)
        if self.queued.get(subject):
            value = self.queued[subject].pop(0)
        else:
            value = self.responses.get(subject, [])
        if isinstance(value, Exception):
            raise value
        return retrieval_of(value)


class FixedClock:
    def __init__(self, now=None):
        self.now = now or datetime(2025, 1, 1, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def stores():
    return in_memory_stores()


@pytest.fixture
def manager():
    return StubManager()


@pytest.fixture
def keyword_strategy():
    return ClassificationStrategy(primary=None)


@pytest.fixture
def hub(manager, stores, clock, keyword_strategy):
    notifier = NotificationService(stores.notifications, url="", api_key="")
    return SentimentHub(
        manager=manager,
        classifier=keyword_strategy,
        stores=stores,
        notifier=notifier,
        clock=clock,
        max_workers=1,
    )


@pytest.fixture
def failing_retrieval():
    return RetrievalError("search backend unreachable")
