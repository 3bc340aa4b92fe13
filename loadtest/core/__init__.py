"""Load test orchestration."""

from loadtest.core.controller import CycleRunner, LoadTestController
from loadtest.core.provisioner import AccountProvisioner
from loadtest.core.reporter import ReportWriter
from loadtest.core.steps import StepRunner
from loadtest.core.workflow import UserWorkflow, WORKFLOW_STEPS

__all__ = [
    "AccountProvisioner",
    "CycleRunner",
    "LoadTestController",
    "ReportWriter",
    "StepRunner",
    "UserWorkflow",
    "WORKFLOW_STEPS",
]
