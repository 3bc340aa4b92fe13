"""Result records collected during a load test run."""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from common.exceptions import RunError
from common.models.account import Account
from common.utils import generate_id, utcnow as _utcnow


class StepKind(str, Enum):
    """Kinds of timed workflow steps."""
    UPLOAD = "upload"
    DOWNLOAD = "download"


class StepResult(BaseModel):
    """Timing record for one upload or download."""
    model_config = ConfigDict(frozen=True)

    kind: StepKind
    started: datetime
    finished: datetime
    elapsed_ms: int = Field(..., ge=0)
    error: Optional[str] = None

    @classmethod
    def timed(
        cls,
        kind: StepKind,
        started: datetime,
        finished: datetime,
        error: Optional[str] = None,
    ) -> "StepResult":
        """Build a result, deriving elapsed_ms from the two timestamps."""
        elapsed = max(int((finished - started).total_seconds() * 1000), 0)
        return cls(kind=kind, started=started, finished=finished, elapsed_ms=elapsed, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None


class StepStats(BaseModel):
    """Aggregate timing over a set of steps."""
    count: int = 0
    failed: int = 0
    avg_ms: float = 0
    min_ms: int = 0
    max_ms: int = 0

    @classmethod
    def from_steps(cls, steps: list[StepResult]) -> "StepStats":
        if not steps:
            return cls()
        elapsed = [s.elapsed_ms for s in steps]
        return cls(
            count=len(steps),
            failed=sum(1 for s in steps if not s.ok),
            avg_ms=sum(elapsed) / len(elapsed),
            min_ms=min(elapsed),
            max_ms=max(elapsed),
        )


class WorkflowResult(BaseModel):
    """Outcome of one simulated user's workflow."""
    user_index: int = 0
    account: Optional[Account] = None
    uploads: list[StepResult] = Field(default_factory=list)
    downloads: list[StepResult] = Field(default_factory=list)
    started: datetime = Field(default_factory=_utcnow)
    finished: Optional[datetime] = None
    error: Optional[str] = None

    def record(self, step: StepResult) -> None:
        """Append a step to the history for its kind."""
        if step.kind == StepKind.UPLOAD:
            self.uploads.append(step)
        else:
            self.downloads.append(step)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def step_count(self) -> int:
        return len(self.uploads) + len(self.downloads)


class CycleResult(BaseModel):
    """All workflows launched in one cycle."""
    run_number: int = Field(..., ge=1)
    started: datetime = Field(default_factory=_utcnow)
    finished: Optional[datetime] = None
    users: list[WorkflowResult] = Field(default_factory=list)

    def close(self) -> None:
        """Mark the cycle finished."""
        self.finished = _utcnow()

    @property
    def failed_users(self) -> list[WorkflowResult]:
        return [u for u in self.users if not u.ok]

    @property
    def ok(self) -> bool:
        return not self.failed_users

    def raise_for_failures(self) -> None:
        """Raise RunError if any workflow in this cycle failed."""
        failed = len(self.failed_users)
        if failed:
            raise RunError(self.run_number, failed, len(self.users))

    def step_stats(self, kind: StepKind) -> StepStats:
        steps: list[StepResult] = []
        for user in self.users:
            steps.extend(user.uploads if kind == StepKind.UPLOAD else user.downloads)
        return StepStats.from_steps(steps)

    @property
    def duration_seconds(self) -> float:
        if self.finished is None:
            return 0
        return (self.finished - self.started).total_seconds()


class Report(BaseModel):
    """Everything collected over one load test run."""
    id: str = Field(default_factory=lambda: generate_id("run"))
    host: Optional[str] = None
    concurrency: int = 0
    cycles: int = 0
    started: datetime = Field(default_factory=_utcnow)
    finished: Optional[datetime] = None
    runs: list[CycleResult] = Field(default_factory=list)

    @property
    def failed_users(self) -> int:
        return sum(len(run.failed_users) for run in self.runs)

    def to_json(self) -> str:
        """Serialize to a single line with a stable field order."""
        return json.dumps(self.model_dump(mode="json"))
