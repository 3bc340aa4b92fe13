"""Timed upload and download steps.

Both runners return a StepResult whether or not the step worked; a failure is
recorded on the result's ``error`` and it is up to the workflow to stop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from common.exceptions import PlatformError, StepError
from common.models.account import Account
from common.models.report import StepKind, StepResult
from common.utils import tail, utcnow
from loadtest.config import LoadTestSettings
from loadtest.platform.client import PlatformClient

logger = logging.getLogger(__name__)


class StepRunner:
    """Run upload (external loader) and download (platform API) steps."""

    def __init__(self, client: PlatformClient, settings: LoadTestSettings):
        self.client = client
        self.settings = settings

    def build_loader_command(self, account: Account) -> list[str]:
        return [
            *self.settings.loader_command,
            "-f", str(self.settings.source_file),
            "-u", account.username,
            "-p", account.password,
        ]

    async def run_upload(self, account: Account) -> StepResult:
        """Upload the source file as the account via the loader program."""
        started = utcnow()
        error: Optional[str] = None
        try:
            await self._run_loader(account)
        except StepError as e:
            error = e.message
        finished = utcnow()

        result = StepResult.timed(StepKind.UPLOAD, started, finished, error)
        if error:
            logger.error(f"[{account.username}] Error uploading data: {error}")
        else:
            logger.info(f"[{account.username}] Upload took {result.elapsed_ms} millis")
        return result

    async def run_download(self, account: Account) -> StepResult:
        """Read back the account's device data."""
        started = utcnow()
        error: Optional[str] = None
        try:
            await self.client.get_device_data_for_user(account.id, token=account.session_token)
        except PlatformError as e:
            error = str(e)
        except Exception as e:
            logger.error(f"[{account.username}] Unexpected download error: {e}", exc_info=True)
            error = f"{type(e).__name__}: {e}"
        finished = utcnow()

        result = StepResult.timed(StepKind.DOWNLOAD, started, finished, error)
        if error:
            logger.error(f"[{account.username}] Error reading data: {error}")
        else:
            logger.info(f"[{account.username}] Download took {result.elapsed_ms} millis")
        return result

    async def _run_loader(self, account: Account) -> None:
        cmd = self.build_loader_command(account)
        logger.debug(f"[{account.username}] Running loader: {' '.join(cmd[:-1])} ****")

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise StepError(StepKind.UPLOAD.value, f"Could not launch loader {cmd[0]}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self.settings.loader_timeout
            )
        except asyncio.TimeoutError:
            if proc.returncode is None:
                try:
                    proc.kill()
                except ProcessLookupError:
                    # exited between the timeout and the kill
                    pass
            await proc.wait()
            raise StepError(
                StepKind.UPLOAD.value,
                f"Loader timed out after {self.settings.loader_timeout}s",
            )

        if proc.returncode != 0:
            message = f"Loader exited with code {proc.returncode}"
            output = tail(stderr.decode(errors="replace")) or tail(stdout.decode(errors="replace"))
            if output:
                message = f"{message}: {output}"
            raise StepError(StepKind.UPLOAD.value, message)
