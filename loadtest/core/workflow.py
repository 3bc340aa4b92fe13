"""Fixed workflow a single simulated user runs through."""

from __future__ import annotations

import logging

from common.exceptions import ProvisioningError
from common.models.account import Account
from common.models.report import StepKind, StepResult, WorkflowResult
from common.utils import utcnow
from loadtest.core.provisioner import AccountProvisioner
from loadtest.core.steps import StepRunner

logger = logging.getLogger(__name__)

# Runs after provisioning, strictly in this order
WORKFLOW_STEPS: tuple[StepKind, ...] = (
    StepKind.UPLOAD,
    StepKind.DOWNLOAD,
    StepKind.UPLOAD,
    StepKind.DOWNLOAD,
)


class UserWorkflow:
    """Provision an account, then upload, download, upload, download.

    The first failing step ends the workflow. Steps that already ran, including
    the failed one, stay in the result.
    """

    def __init__(
        self,
        provisioner: AccountProvisioner,
        step_runner: StepRunner,
        user_index: int = 0,
    ):
        self.provisioner = provisioner
        self.step_runner = step_runner
        self.user_index = user_index

    async def run(self) -> WorkflowResult:
        result = WorkflowResult(user_index=self.user_index, started=utcnow())

        logger.info(f"[user {self.user_index}] Creating account ...")
        try:
            account = await self.provisioner.provision()
        except ProvisioningError as e:
            logger.error(f"[user {self.user_index}] {e}")
            result.error = str(e)
            result.finished = utcnow()
            return result

        result.account = account
        seen: dict[StepKind, int] = {}
        for kind in WORKFLOW_STEPS:
            seen[kind] = seen.get(kind, 0) + 1
            again = " AGAIN" if seen[kind] > 1 else ""
            verb = "Uploading" if kind == StepKind.UPLOAD else "Reading"
            logger.info(f"[{account.username}] {verb} data{again} ...")

            step = await self._run_step(kind, account)
            result.record(step)
            if not step.ok:
                result.error = f"{kind.value} {seen[kind]} failed: {step.error}"
                break

        result.finished = utcnow()
        return result

    async def _run_step(self, kind: StepKind, account: Account) -> StepResult:
        runner = self.step_runner.run_upload if kind == StepKind.UPLOAD else self.step_runner.run_download
        started = utcnow()
        try:
            return await runner(account)
        except Exception as e:
            logger.error(f"[{account.username}] Unexpected {kind.value} error: {e}", exc_info=True)
            return StepResult.timed(kind, started, utcnow(), error=f"{type(e).__name__}: {e}")
