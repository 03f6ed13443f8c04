"""Client configuration.

Values come from code, or from the environment via ClientConfig.from_env():

    TABLERPC_URL            Peer URL (default: ws://127.0.0.1:3030)
    TABLERPC_CONNECTIONS    Pool size (default: 1)
    TABLERPC_CALL_TIMEOUT   Seconds to wait for a response; "none" waits forever
    TABLERPC_OPEN_TIMEOUT   Seconds to wait for each connection to open
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_URL = "ws://127.0.0.1:3030"
DEFAULT_CALL_TIMEOUT = 30.0
DEFAULT_OPEN_TIMEOUT = 10.0

ENV_URL = "TABLERPC_URL"
ENV_CONNECTIONS = "TABLERPC_CONNECTIONS"
ENV_CALL_TIMEOUT = "TABLERPC_CALL_TIMEOUT"
ENV_OPEN_TIMEOUT = "TABLERPC_OPEN_TIMEOUT"

# Timeout values meaning "no timeout"
_NO_TIMEOUT = {"", "none", "off", "never"}


@dataclass
class ClientConfig:
    """Configuration for RpcClient.

    The pool size is fixed for the client's lifetime.
    """

    # Peer
    url: str = DEFAULT_URL
    connection_count: int = 1

    # Timeouts (seconds, None = unbounded)
    call_timeout: float | None = DEFAULT_CALL_TIMEOUT
    open_timeout: float | None = DEFAULT_OPEN_TIMEOUT

    # WebSocket keepalive
    ping_interval: float | None = 30.0
    ping_timeout: float | None = 10.0

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("url must not be empty")
        if self.connection_count < 1:
            raise ValueError(f"connection_count must be positive, got {self.connection_count}")
        for name in ("call_timeout", "open_timeout", "ping_interval", "ping_timeout"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive or None, got {value}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Build a config from environment variables, falling back to defaults.

        Raises:
            ValueError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        return cls(
            url=env.get(ENV_URL, DEFAULT_URL),
            connection_count=_parse_int(env, ENV_CONNECTIONS, 1),
            call_timeout=_parse_timeout(env, ENV_CALL_TIMEOUT, DEFAULT_CALL_TIMEOUT),
            open_timeout=_parse_timeout(env, ENV_OPEN_TIMEOUT, DEFAULT_OPEN_TIMEOUT),
        )


def _parse_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from e


def _parse_timeout(env: Mapping[str, str], key: str, default: float | None) -> float | None:
    raw = env.get(key)
    if raw is None:
        return default
    if raw.strip().lower() in _NO_TIMEOUT:
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{key} must be a number of seconds or 'none', got {raw!r}") from e
