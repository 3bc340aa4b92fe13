"""Models, errors and helpers shared by the load tester and the report CLI."""

from common.models.account import Account, Profile
from common.models.report import StepKind, StepResult, WorkflowResult, CycleResult, Report
from common.exceptions import (
    LoadTestError,
    PlatformError,
    ProvisioningError,
    StepError,
    RunError,
)

__all__ = [
    "Account",
    "Profile",
    "StepKind",
    "StepResult",
    "WorkflowResult",
    "CycleResult",
    "Report",
    "LoadTestError",
    "PlatformError",
    "ProvisioningError",
    "StepError",
    "RunError",
]
