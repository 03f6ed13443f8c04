"""Unit tests for ClientConfig."""

from __future__ import annotations

import pytest

from tablerpc.config import DEFAULT_CALL_TIMEOUT, DEFAULT_URL, ClientConfig


class TestClientConfig:
    """Tests for validation and defaults."""

    def test_defaults(self) -> None:
        """Defaults point at the local peer with one connection."""
        config = ClientConfig()

        assert config.url == DEFAULT_URL
        assert config.connection_count == 1
        assert config.call_timeout == DEFAULT_CALL_TIMEOUT

    @pytest.mark.parametrize("count", [0, -1])
    def test_rejects_bad_count(self, count: int) -> None:
        """Pool size must be positive."""
        with pytest.raises(ValueError, match="connection_count"):
            ClientConfig(connection_count=count)

    def test_rejects_empty_url(self) -> None:
        with pytest.raises(ValueError, match="url"):
            ClientConfig(url="")

    def test_rejects_non_positive_timeout(self) -> None:
        """Timeouts are positive or None."""
        with pytest.raises(ValueError, match="call_timeout"):
            ClientConfig(call_timeout=0)

        assert ClientConfig(call_timeout=None).call_timeout is None


class TestFromEnv:
    """Tests for ClientConfig.from_env."""

    def test_empty_env_uses_defaults(self) -> None:
        assert ClientConfig.from_env({}) == ClientConfig()

    def test_reads_variables(self) -> None:
        """Every TABLERPC_* variable is applied."""
        config = ClientConfig.from_env(
            {
                "TABLERPC_URL": "ws://db:9000",
                "TABLERPC_CONNECTIONS": "4",
                "TABLERPC_CALL_TIMEOUT": "2.5",
                "TABLERPC_OPEN_TIMEOUT": "1",
            }
        )

        assert config.url == "ws://db:9000"
        assert config.connection_count == 4
        assert config.call_timeout == 2.5
        assert config.open_timeout == 1.0

    @pytest.mark.parametrize("value", ["none", "NONE", "off", "never", ""])
    def test_timeout_disabled(self, value: str) -> None:
        """Timeouts can be disabled from the environment."""
        config = ClientConfig.from_env({"TABLERPC_CALL_TIMEOUT": value})

        assert config.call_timeout is None

    def test_invalid_integer(self) -> None:
        with pytest.raises(ValueError, match="TABLERPC_CONNECTIONS"):
            ClientConfig.from_env({"TABLERPC_CONNECTIONS": "many"})

    def test_invalid_timeout(self) -> None:
        with pytest.raises(ValueError, match="TABLERPC_CALL_TIMEOUT"):
            ClientConfig.from_env({"TABLERPC_CALL_TIMEOUT": "soon"})
