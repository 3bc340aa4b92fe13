"""Pytest configuration and shared fixtures."""

import asyncio
import itertools
import sys
from pathlib import Path
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from common.exceptions import ProvisioningError
from common.models.account import Account
from common.models.report import StepKind, StepResult
from common.utils import utcnow
from loadtest.config import LoadTestSettings
from loadtest.platform.client import PlatformClient, SignupResult


def _python_loader(code: str) -> list[str]:
    return [sys.executable, "-c", code]


class FakeProvisioner:
    """Hands out numbered accounts, or fails every call."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self._counter = itertools.count(1)

    async def provision(self) -> Account:
        n = next(self._counter)
        await asyncio.sleep(0)
        if self.fail:
            raise ProvisioningError(f"Could not provision user{n}: signup failed [500]")
        return Account(id=f"id-{n}", username=f"user{n}+skipit@example.org", password="secret12")


class FakeStepRunner:
    """Step runner that fails on the n-th occurrence of a step kind."""

    def __init__(
        self,
        fail_on: Optional[tuple[StepKind, int]] = None,
        delay: float = 0.0,
    ):
        self.fail_on = fail_on
        self.delay = delay
        self.calls: list[StepKind] = []

    async def run_upload(self, account: Account) -> StepResult:
        return await self._run(StepKind.UPLOAD)

    async def run_download(self, account: Account) -> StepResult:
        return await self._run(StepKind.DOWNLOAD)

    async def _run(self, kind: StepKind) -> StepResult:
        started = utcnow()
        self.calls.append(kind)
        await asyncio.sleep(self.delay)
        occurrence = self.calls.count(kind)
        error = None
        if self.fail_on == (kind, occurrence):
            error = f"{kind.value} boom"
        return StepResult.timed(kind, started, utcnow(), error)


@pytest.fixture
def settings(tmp_path: Path) -> LoadTestSettings:
    """Settings pointing the report and loader at test doubles."""
    return LoadTestSettings(
        api_url="http://platform.test",
        loader_command=_python_loader("import sys; sys.exit(0)"),
        source_file=Path("data.ibf"),
        report_dir=tmp_path / "reports",
        email_suffix="+skipit@example.org",
    )


@pytest.fixture
def account() -> Account:
    """A provisioned account."""
    return Account(
        id="abc123",
        username="qwerty+skipit@example.org",
        password="pa55word",
        emails=["qwerty+skipit@example.org"],
        session_token="user-token",
    )


@pytest.fixture
def mock_platform_client() -> MagicMock:
    """Create a mock platform client."""
    mock = MagicMock(spec=PlatformClient)
    mock.host = "http://platform.test"
    mock.initialize = AsyncMock()
    mock.signup = AsyncMock(return_value=SignupResult(userid="abc123", token="user-token"))
    mock.add_or_update_profile = AsyncMock(return_value={})
    mock.get_device_data_for_user = AsyncMock(return_value=[])
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def python_loader():
    """Build loader commands that run a Python snippet instead of the real uploader."""
    return _python_loader


@pytest.fixture
def make_provisioner():
    """Factory for fake provisioners."""
    return FakeProvisioner


@pytest.fixture
def make_step_runner():
    """Factory for fake step runners."""
    return FakeStepRunner
