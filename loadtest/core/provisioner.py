"""Creates throwaway accounts on the platform."""

from __future__ import annotations

import logging

from common.exceptions import PlatformError, ProvisioningError
from common.models.account import Account, PatientInfo, Profile
from common.utils import ALPHANUMERIC, READABLE_ALPHABETIC, random_string
from loadtest.config import LoadTestSettings
from loadtest.platform.client import PlatformClient

logger = logging.getLogger(__name__)


class AccountProvisioner:
    """Sign up a random user and give it a minimal profile."""

    def __init__(self, client: PlatformClient, settings: LoadTestSettings):
        self.client = client
        self.settings = settings

    def new_username(self) -> str:
        return random_string(self.settings.username_length, READABLE_ALPHABETIC) + self.settings.email_suffix

    def new_password(self) -> str:
        return random_string(self.settings.password_length, ALPHANUMERIC)

    def new_profile(self, username: str) -> Profile:
        return Profile(
            full_name=username,
            patient=PatientInfo(
                birthday=self.settings.profile_birthday,
                diagnosis_date=self.settings.profile_diagnosis_date,
            ),
        )

    async def provision(self) -> Account:
        """Create one account. Nothing is cleaned up remotely."""
        username = self.new_username()
        password = self.new_password()
        profile = self.new_profile(username)

        logger.info(f"Adding account {username}")
        try:
            signup = await self.client.signup(username, password, [username])
            await self.client.add_or_update_profile(
                signup.userid, profile.to_payload(), token=signup.token
            )
        except PlatformError as e:
            raise ProvisioningError(f"Could not provision {username}: {e}") from e

        return Account(
            id=signup.userid,
            username=username,
            password=password,
            emails=[username],
            profile=profile,
            session_token=signup.token,
        )
