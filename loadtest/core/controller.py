"""Cycle runner and load test controller."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from common.exceptions import RunError
from common.models.report import CycleResult, Report, StepKind, WorkflowResult
from common.utils import format_duration, utcnow
from loadtest.config import LoadTestSettings
from loadtest.core.provisioner import AccountProvisioner
from loadtest.core.reporter import ReportWriter
from loadtest.core.steps import StepRunner
from loadtest.core.workflow import UserWorkflow
from loadtest.platform.client import PlatformClient

logger = logging.getLogger(__name__)


class CycleRunner:
    """Run N user workflows concurrently and wait for every one of them."""

    def __init__(self, provisioner: AccountProvisioner, step_runner: StepRunner):
        self.provisioner = provisioner
        self.step_runner = step_runner

    def create_workflow(self, user_index: int) -> UserWorkflow:
        return UserWorkflow(self.provisioner, self.step_runner, user_index=user_index)

    async def run_cycle(self, run_number: int, concurrency: int) -> CycleResult:
        """Fan out `concurrency` workflows; a failure never cancels its siblings."""
        cycle = CycleResult(run_number=run_number, started=utcnow())

        tasks = [self.create_workflow(i).run() for i in range(concurrency)]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for i, result in enumerate(results):
            if isinstance(result, Exception):
                logger.error(f"Cycle {run_number}: workflow {i} crashed: {result}")
                result = WorkflowResult(
                    user_index=i,
                    finished=utcnow(),
                    error=f"{type(result).__name__}: {result}",
                )
            elif isinstance(result, BaseException):
                raise result
            cycle.users.append(result)

        cycle.close()
        return cycle


class LoadTestController:
    """Run cycles one after another and collect them into a report."""

    def __init__(
        self,
        client: PlatformClient,
        settings: LoadTestSettings,
        writer: Optional[ReportWriter] = None,
    ):
        self.client = client
        self.settings = settings
        self.writer = writer or ReportWriter(
            settings.report_dir,
            prefix=settings.report_prefix,
            suffix=settings.report_suffix,
        )
        self.cycle_runner = CycleRunner(
            AccountProvisioner(client, settings),
            StepRunner(client, settings),
        )

    async def run(self, cycles: int, concurrency: int) -> Report:
        """Run `cycles` cycles of `concurrency` users each."""
        if cycles < 1:
            raise ValueError(f"cycles must be >= 1, got {cycles}")
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")

        report = Report(host=self.client.host, concurrency=concurrency, cycles=cycles)
        logger.info(f"Starting load test {report.id}: {cycles} cycles x {concurrency} users")

        for run_number in range(1, cycles + 1):
            logger.info(f"Starting cycle {run_number}/{cycles}")
            cycle = await self.cycle_runner.run_cycle(run_number, concurrency)
            report.runs.append(cycle)
            self._log_cycle(cycle)

        report.finished = utcnow()
        total_seconds = int((report.finished - report.started).total_seconds())
        logger.info(
            f"Load test finished in {format_duration(total_seconds)}: "
            f"{report.failed_users} failed workflows across {len(report.runs)} cycles"
        )
        return report

    async def execute(self, cycles: int, concurrency: int) -> Path:
        """Run the whole load test and write its report."""
        report = await self.run(cycles, concurrency)
        return self.writer.write(report)

    def _log_cycle(self, cycle: CycleResult) -> None:
        uploads = cycle.step_stats(StepKind.UPLOAD)
        downloads = cycle.step_stats(StepKind.DOWNLOAD)
        logger.info(
            f"Cycle {cycle.run_number} finished in {cycle.duration_seconds:.1f}s: "
            f"upload avg {uploads.avg_ms:.0f}ms, download avg {downloads.avg_ms:.0f}ms"
        )
        try:
            cycle.raise_for_failures()
        except RunError as e:
            logger.warning(str(e))
        else:
            logger.info(f"Cycle {cycle.run_number}: all tests run")
