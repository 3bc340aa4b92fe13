"""Unit tests for Pydantic models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from common.exceptions import RunError
from common.models.account import Account, PatientInfo, Profile
from common.models.report import (
    CycleResult,
    Report,
    StepKind,
    StepResult,
    StepStats,
    WorkflowResult,
)

T0 = datetime(2024, 3, 18, 12, 0, 0, tzinfo=timezone.utc)


def step(kind: StepKind, ms: int, error: str = None, start: datetime = T0) -> StepResult:
    return StepResult.timed(kind, start, start + timedelta(milliseconds=ms), error)


class TestAccountModels:
    """Tests for account models."""

    def test_profile_payload_uses_platform_names(self):
        """Test profile serializes with camelCase keys."""
        profile = Profile(full_name="qwerty")

        assert profile.to_payload() == {
            "fullName": "qwerty",
            "patient": {"birthday": "1900-01-01", "diagnosisDate": "1900-01-01"},
        }

    def test_patient_info_accepts_alias(self):
        """Test patient info can be built from the platform's field names."""
        patient = PatientInfo(birthday="1980-02-02", diagnosisDate="1990-03-03")

        assert patient.diagnosis_date == "1990-03-03"

    def test_account_is_immutable(self, account):
        """Test accounts cannot be modified once created."""
        with pytest.raises(ValidationError):
            account.password = "changed"

    def test_account_session_token_not_serialized(self, account):
        """Test the session token stays out of dumps."""
        data = account.model_dump()

        assert "session_token" not in data
        assert data["username"] == "qwerty+skipit@example.org"


class TestStepResult:
    """Tests for step results."""

    def test_timed_computes_elapsed(self):
        """Test elapsed_ms comes from the timestamps."""
        result = step(StepKind.UPLOAD, 1500)

        assert result.elapsed_ms == 1500
        assert result.ok is True

    def test_timed_clamps_negative(self):
        """Test clock skew never yields negative durations."""
        result = StepResult.timed(StepKind.DOWNLOAD, T0, T0 - timedelta(seconds=1))

        assert result.elapsed_ms == 0

    def test_error_marks_not_ok(self):
        """Test a step with an error is a failure."""
        result = step(StepKind.DOWNLOAD, 10, error="GET /data/x failed [500]")

        assert result.ok is False

    def test_step_stats(self):
        """Test aggregate timings."""
        stats = StepStats.from_steps([
            step(StepKind.UPLOAD, 100),
            step(StepKind.UPLOAD, 300, error="boom"),
        ])

        assert stats.count == 2
        assert stats.failed == 1
        assert stats.avg_ms == 200
        assert stats.min_ms == 100
        assert stats.max_ms == 300

    def test_step_stats_empty(self):
        """Test stats over no steps."""
        assert StepStats.from_steps([]).count == 0


class TestWorkflowResult:
    """Tests for workflow results."""

    def test_record_routes_by_kind(self):
        """Test steps land in the list for their kind."""
        result = WorkflowResult()
        result.record(step(StepKind.UPLOAD, 10))
        result.record(step(StepKind.DOWNLOAD, 20))
        result.record(step(StepKind.UPLOAD, 30))

        assert [s.elapsed_ms for s in result.uploads] == [10, 30]
        assert [s.elapsed_ms for s in result.downloads] == [20]
        assert result.step_count == 3

    def test_ok(self):
        """Test workflow success flag."""
        result = WorkflowResult()
        assert result.ok is True

        result.error = "download 1 failed: boom"
        assert result.ok is False


class TestCycleResult:
    """Tests for cycle results."""

    def test_raise_for_failures(self):
        """Test RunError is raised when any workflow failed."""
        cycle = CycleResult(
            run_number=2,
            users=[WorkflowResult(user_index=0), WorkflowResult(user_index=1, error="boom")],
        )

        with pytest.raises(RunError) as exc_info:
            cycle.raise_for_failures()

        assert exc_info.value.run_number == 2
        assert exc_info.value.failed == 1
        assert exc_info.value.total == 2
        assert cycle.ok is False

    def test_raise_for_failures_clean_cycle(self):
        """Test no error for a clean cycle."""
        cycle = CycleResult(run_number=1, users=[WorkflowResult()])

        cycle.raise_for_failures()
        assert cycle.ok is True

    def test_close_sets_finished(self):
        """Test closing a cycle."""
        cycle = CycleResult(run_number=1)
        assert cycle.finished is None

        cycle.close()

        assert cycle.finished is not None
        assert cycle.duration_seconds >= 0

    def test_run_number_must_be_positive(self):
        """Test cycles are numbered from 1."""
        with pytest.raises(ValidationError):
            CycleResult(run_number=0)

    def test_step_stats_by_kind(self):
        """Test per-kind stats over all users."""
        user = WorkflowResult()
        user.record(step(StepKind.UPLOAD, 100))
        user.record(step(StepKind.DOWNLOAD, 40))
        cycle = CycleResult(run_number=1, users=[user])

        assert cycle.step_stats(StepKind.UPLOAD).avg_ms == 100
        assert cycle.step_stats(StepKind.DOWNLOAD).max_ms == 40


class TestReport:
    """Tests for the report model."""

    def _report(self) -> Report:
        user = WorkflowResult(
            user_index=0,
            account=Account(id="abc", username="a+x@y.org", password="pw", session_token="t"),
            started=T0,
            finished=T0 + timedelta(seconds=5),
        )
        user.record(step(StepKind.UPLOAD, 1200))
        user.record(step(StepKind.DOWNLOAD, 300, error="GET /data/abc failed [503]"))
        user.error = "download 1 failed: GET /data/abc failed [503]"
        cycle = CycleResult(run_number=1, started=T0, finished=T0 + timedelta(seconds=6), users=[user])
        return Report(
            id="run_1",
            host="http://platform.test",
            concurrency=1,
            cycles=1,
            started=T0,
            finished=T0 + timedelta(seconds=7),
            runs=[cycle],
        )

    def test_to_json_is_stable(self):
        """Test serializing the same report twice is byte-identical."""
        report = self._report()

        assert report.to_json() == report.to_json()

    def test_to_json_omits_session_token(self):
        """Test secrets are not written to reports."""
        assert "session_token" not in self._report().to_json()

    def test_failed_users(self):
        """Test failed workflow count across runs."""
        assert self._report().failed_users == 1

    def test_json_reloads(self):
        """Test a serialized report validates back into the same data."""
        report = self._report()
        loaded = Report.model_validate_json(report.to_json())

        assert loaded.to_json() == report.to_json()
        assert loaded.runs[0].users[0].downloads[0].kind == StepKind.DOWNLOAD
