"""
Client configuration.

The service endpoint is an explicit value handed to the client at
construction time. ``ClientConfig.from_env`` reads the environment once
for callers that want the process-wide defaults.
"""

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from hcapi.exceptions import InvalidArgumentError

DEFAULT_BASE_URL = "http://hcapi.harvestchoice.org"
DEFAULT_TIMEOUT = 120
DEFAULT_USER_AGENT = "http://github.com/harvestchoice/hc-api"

BASE_URL_ENV = "HCAPI_BASEURL"
TIMEOUT_ENV = "HCAPI_TIMEOUT"


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable settings for HarvestChoiceClient.

    Attributes
    ----------
    base_url : str
        Root URL of the HarvestChoice OpenCPU service
    timeout : float
        Per-request timeout in seconds
    user_agent : str
        Value of the User-Agent header sent with every request
    """

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        if not self.base_url:
            raise InvalidArgumentError("base_url must not be empty")
        if (
            not isinstance(self.timeout, (int, float))
            or isinstance(self.timeout, bool)
            or self.timeout <= 0
        ):
            raise InvalidArgumentError(
                f"timeout must be a positive number, got {self.timeout!r}"
            )
        # Normalise so that path joining never produces "//"
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        """
        Build configuration from environment variables.

        Parameters
        ----------
        environ : Mapping, optional
            Environment to read (defaults to ``os.environ``)

        Returns
        -------
        ClientConfig
            Configuration with ``HCAPI_BASEURL`` and ``HCAPI_TIMEOUT`` applied
        """
        env = os.environ if environ is None else environ

        timeout_raw = env.get(TIMEOUT_ENV)
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT
        except ValueError:
            raise InvalidArgumentError(
                f"{TIMEOUT_ENV} must be a number, got {timeout_raw!r}"
            ) from None

        return cls(
            base_url=env.get(BASE_URL_ENV) or DEFAULT_BASE_URL,
            timeout=timeout,
        )

    def with_base_url(self, base_url: str) -> "ClientConfig":
        """Return a copy pointing at another service endpoint."""
        return replace(self, base_url=base_url)

    def url(self, path: str) -> str:
        """Join a service path onto the base URL."""
        return f"{self.base_url}/{path.lstrip('/')}"
