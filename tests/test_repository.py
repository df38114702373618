"""
Tests for the analysis repository (in-memory SQLite).
"""

import dataclasses
from datetime import datetime, timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from domain_analyzer.database import AnalysisRepository
from domain_analyzer.pipeline.errors import PersistenceError
from domain_analyzer.pipeline.models import (
    AnalysisRecord,
    AnalysisStatus,
    Finding,
    ScoreBreakdown,
    Severity,
)

URL = "https://example.com"


def make_record(cache_key="abcd1234abcd1234", report=None, generated_at=None, domain="example.com"):
    return AnalysisRecord(
        id=uuid4(),
        requester_id="user-1",
        domain=domain,
        scores=ScoreBreakdown(technical=34, performance=15, authority=9, total=58),
        raw_signals={"domain": domain, "title_length": 10},
        cache_key=cache_key,
        generated_at=generated_at or datetime.utcnow(),
        report=report,
    )


FINDINGS = [
    Finding("title_tag", Severity.WARNING, "Title tag is too short", URL, 5),
    Finding("meta_description", Severity.ERROR, "Missing meta description", URL, 10),
    Finding("performance", Severity.WARNING, "Performance analysis unavailable", URL),
]


class TestSaveAndLoad:

    def test_save_analysis(self, repository):
        record = make_record(report="# Report")

        stored = repository.save_analysis(record)

        assert stored.id == record.id
        assert stored.scores == record.scores
        assert stored.report == "# Report"
        assert stored.status == AnalysisStatus.COMPLETED

    def test_round_trip_with_findings_in_order(self, repository):
        stored = repository.save_analysis(make_record())
        written = repository.save_findings(stored.id, FINDINGS)

        loaded = repository.get_analysis(stored.id)

        assert written == 3
        assert loaded.domain == "example.com"
        assert loaded.raw_signals == {"domain": "example.com", "title_length": 10}
        assert loaded.findings == FINDINGS

    def test_save_no_findings(self, repository):
        stored = repository.save_analysis(make_record())

        assert repository.save_findings(stored.id, []) == 0
        assert repository.get_analysis(stored.id).findings == []

    def test_stored_record_is_immutable(self, repository):
        stored = repository.save_analysis(make_record(report="# Report"))

        with pytest.raises(dataclasses.FrozenInstanceError):
            stored.report = "# Rewritten"

    def test_missing_analysis(self, repository):
        assert repository.get_analysis(uuid4()) is None

    def test_record_to_dict(self, repository):
        stored = repository.save_analysis(make_record())
        repository.save_findings(stored.id, FINDINGS[:1])

        data = repository.get_analysis(stored.id).to_dict()

        assert data["id"] == str(stored.id)
        assert data["scores"]["total"] == 58
        assert data["findings"][0]["kind"] == "title_tag"
        assert data["status"] == "completed"


class TestCacheLookup:

    def test_most_recent_with_report(self, repository):
        now = datetime.utcnow()
        repository.save_analysis(make_record(report="old", generated_at=now - timedelta(hours=2)))
        newest = repository.save_analysis(make_record(report="new", generated_at=now - timedelta(hours=1)))
        repository.save_analysis(make_record(report=None, generated_at=now))

        found = repository.find_report_by_cache_key("abcd1234abcd1234")

        assert found.id == newest.id
        assert found.report == "new"

    def test_no_report_no_hit(self, repository):
        repository.save_analysis(make_record(report=None))

        assert repository.find_report_by_cache_key("abcd1234abcd1234") is None

    def test_other_key_no_hit(self, repository):
        repository.save_analysis(make_record(report="r"))

        assert repository.find_report_by_cache_key("ffffffffffffffff") is None


class TestFailures:

    def _broken_factory(self):
        session = MagicMock()
        session.commit.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))
        return MagicMock(return_value=session), session

    def test_save_analysis_raises_persistence_error(self):
        factory, session = self._broken_factory()

        with pytest.raises(PersistenceError):
            AnalysisRepository(factory).save_analysis(make_record())
        session.rollback.assert_called_once()
        session.close.assert_called_once()

    def test_save_findings_raises_persistence_error(self):
        factory, _ = self._broken_factory()

        with pytest.raises(PersistenceError):
            AnalysisRepository(factory).save_findings(uuid4(), FINDINGS)
