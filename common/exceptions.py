"""Error taxonomy for load test runs."""

from __future__ import annotations

from typing import Optional


class LoadTestError(Exception):
    """Base class for all load test errors."""


class PlatformError(LoadTestError):
    """A call to the platform API failed (transport or application error)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} [{self.status_code}]"
        return self.message


class ProvisioningError(LoadTestError):
    """Account or profile creation failed. Aborts a single workflow."""


class StepError(LoadTestError):
    """An upload or download step failed."""

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind} failed: {self.message}"


class RunError(LoadTestError):
    """At least one workflow in a cycle failed. Never fatal to the run."""

    def __init__(self, run_number: int, failed: int, total: int):
        super().__init__(f"A test run failed: cycle {run_number} had {failed}/{total} failed workflows")
        self.run_number = run_number
        self.failed = failed
        self.total = total
