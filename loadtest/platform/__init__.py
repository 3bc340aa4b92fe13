"""Platform API client."""

from loadtest.platform.client import PlatformClient, SignupResult

__all__ = ["PlatformClient", "SignupResult"]
