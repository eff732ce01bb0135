"""Tests for interactive analysis, saved history and trend queries."""

from unittest.mock import MagicMock

import pytest

from sentimenthub.core.errors import InputValidationError, NotFoundError, PersistenceError
from sentimenthub.core.models import Platform

from conftest import make_batch, make_snippet


class TestAnalyze:
    def test_returns_summary(self, hub, manager):
        manager.set("Acme", make_batch("Acme", positive=3, negative=1))
        result = hub.analyze("Acme")

        assert result.has_data
        assert result.summary.positive_ratio == 75
        assert result.summary.total_analyzed == 4
        assert result.record_id is None

    def test_zero_candidates_is_no_data(self, hub, manager, stores):
        manager.set("Ghost", [])
        result = hub.analyze("Ghost")
        assert not result.has_data
        assert stores.trends.list_by_subject("Ghost", 10) == []

    def test_only_short_snippets_is_no_data(self, hub, manager):
        manager.set("Acme", [make_snippet("too short"), make_snippet("also short")])
        assert not hub.analyze("Acme").has_data

    def test_retrieval_failure_is_no_data(self, hub, manager, failing_retrieval):
        manager.set("Acme", failing_retrieval)
        result = hub.analyze("Acme")
        assert not result.has_data
        assert result.subject == "Acme"

    def test_does_not_record_trend_point(self, hub, manager, stores):
        manager.set("Acme", make_batch("Acme", positive=2))
        hub.analyze("Acme", owner="alice")
        assert stores.trends.list_by_subject("Acme", 10) == []

    def test_breakdown_is_raw_and_total_is_deduplicated(self, hub, manager):
        text = "I love Acme, the best assistant I have used this year"
        manager.set("Acme", [
            make_snippet(text, Platform.TWITTER),
            make_snippet(text, Platform.TWITTER),
            make_snippet(text.upper(), Platform.REDDIT),
            make_snippet("Acme is fine for small tasks, nothing special", Platform.WEB),
        ])
        summary = hub.analyze("Acme").summary
        assert summary.total_analyzed == 2
        assert summary.source_breakdown == {"twitter": 2, "reddit": 1, "news": 0, "web": 1}
        assert summary.sources == ["Twitter", "medium.com"]

    @pytest.mark.parametrize("subject", ["", "   ", "x" * 201])
    def test_invalid_subject_rejected_before_retrieval(self, hub, manager, subject):
        with pytest.raises(InputValidationError):
            hub.analyze(subject)
        assert manager.calls == []

    def test_subject_is_stripped(self, hub, manager):
        manager.set("Acme", make_batch("Acme", positive=1))
        assert hub.analyze("  Acme  ").subject == "Acme"
        assert manager.calls == ["Acme"]


class TestHistory:
    def test_saved_for_owner(self, hub, manager):
        manager.set("Acme", make_batch("Acme", positive=2, negative=2))
        result = hub.analyze("Acme", owner="alice")

        assert result.record_id is not None
        records = hub.history("alice")
        assert [r.id for r in records] == [result.record_id]
        assert hub.get_record("alice", result.record_id).summary == result.summary
        assert hub.history("bob") == []

    def test_other_owner_cannot_read_record(self, hub, manager):
        manager.set("Acme", make_batch("Acme", positive=1))
        record_id = hub.analyze("Acme", owner="alice").record_id
        with pytest.raises(NotFoundError):
            hub.get_record("bob", record_id)
        with pytest.raises(NotFoundError):
            hub.get_record("alice", 999)

    def test_save_failure_still_returns_summary(self, hub, manager, stores):
        manager.set("Acme", make_batch("Acme", positive=1, negative=1))
        stores.analyses.save = MagicMock(side_effect=PersistenceError("disk full"))

        result = hub.analyze("Acme", owner="alice")
        assert result.has_data
        assert result.record_id is None
        assert "disk full" in result.save_error


class TestGetTrend:
    def test_limit_validated(self, hub):
        with pytest.raises(InputValidationError):
            hub.get_trend("Acme", limit=0)

    def test_empty_for_unknown_subject(self, hub):
        assert hub.get_trend("Acme") == []
