"""
Tests for client configuration.
"""

import pytest

from hcapi.config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    ClientConfig,
)
from hcapi.exceptions import InvalidArgumentError


class TestClientConfig:
    """Test ClientConfig."""

    def test_defaults(self):
        """Test default values."""
        config = ClientConfig()
        assert config.base_url == DEFAULT_BASE_URL
        assert config.timeout == DEFAULT_TIMEOUT
        assert "harvestchoice" in config.user_agent

    def test_trailing_slash_removed(self):
        """Test base URL normalisation."""
        assert ClientConfig(base_url="http://a.b/").base_url == "http://a.b"

    def test_url_join(self):
        """Test joining service paths."""
        config = ClientConfig(base_url="http://a.b/")
        assert config.url("/ocpu/tmp/x/zip") == "http://a.b/ocpu/tmp/x/zip"
        assert config.url("ocpu/tmp/x/zip") == "http://a.b/ocpu/tmp/x/zip"

    def test_is_frozen(self):
        """Test immutability."""
        config = ClientConfig()
        with pytest.raises(AttributeError):
            config.base_url = "http://other"

    def test_with_base_url(self):
        """Test copying with another endpoint."""
        config = ClientConfig(timeout=10)
        other = config.with_base_url("http://other/")
        assert other.base_url == "http://other"
        assert other.timeout == 10
        assert config.base_url == DEFAULT_BASE_URL

    def test_empty_base_url(self):
        """Test that an empty base URL is rejected."""
        with pytest.raises(InvalidArgumentError):
            ClientConfig(base_url="")

    @pytest.mark.parametrize("timeout", [0, -1.5, "30", None, True])
    def test_invalid_timeout_value(self, timeout):
        """Test that the timeout must be a positive number."""
        with pytest.raises(InvalidArgumentError, match="timeout"):
            ClientConfig(timeout=timeout)


class TestClientConfigFromEnv:
    """Test ClientConfig.from_env()."""

    def test_empty_environment(self):
        """Test defaults when nothing is set."""
        assert ClientConfig.from_env({}) == ClientConfig()

    def test_reads_variables(self):
        """Test that both variables are read."""
        config = ClientConfig.from_env(
            {"HCAPI_BASEURL": "http://local:8004", "HCAPI_TIMEOUT": "30"}
        )
        assert config.base_url == "http://local:8004"
        assert config.timeout == 30.0

    def test_invalid_timeout(self):
        """Test a non-numeric timeout."""
        with pytest.raises(InvalidArgumentError, match="HCAPI_TIMEOUT"):
            ClientConfig.from_env({"HCAPI_TIMEOUT": "soon"})

    def test_reads_os_environ(self, monkeypatch):
        """Test the default environment source."""
        monkeypatch.setenv("HCAPI_BASEURL", "http://from-env")
        monkeypatch.delenv("HCAPI_TIMEOUT", raising=False)
        assert ClientConfig.from_env().base_url == "http://from-env"
