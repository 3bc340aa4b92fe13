"""Data models for load test runs."""

from common.models.account import Account, Profile, PatientInfo
from common.models.report import (
    StepKind,
    StepResult,
    StepStats,
    WorkflowResult,
    CycleResult,
    Report,
)

__all__ = [
    "Account",
    "Profile",
    "PatientInfo",
    "StepKind",
    "StepResult",
    "StepStats",
    "WorkflowResult",
    "CycleResult",
    "Report",
]
