"""Connection and timeout settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields

from monkey_link.errors import invalid_argument_error

ENV_PREFIX = "MONKEY_LINK_"


@dataclass(frozen=True)
class MonkeyConfig:
    """Where the monkey service listens and how long to wait for it."""

    host: str = "127.0.0.1"
    port: int = 12345
    connect_timeout_ms: int = 30_000
    poll_interval_ms: int = 1_000
    warmup_ms: int = 1_000
    probe_timeout_ms: int = 2_000
    shell_timeout_ms: int = 5_000

    @classmethod
    def from_env(cls) -> MonkeyConfig:
        """Build a config, overriding defaults from MONKEY_LINK_* variables.

        Raises:
            MonkeyError: If a numeric variable does not parse (ERR_INVALID_ARGUMENT).
        """
        overrides: dict[str, str | int] = {}
        for f in fields(cls):
            env_name = ENV_PREFIX + f.name.upper()
            raw = os.environ.get(env_name)
            if raw is None:
                continue
            if f.name == "host":
                overrides[f.name] = raw
                continue
            try:
                overrides[f.name] = int(raw)
            except ValueError as err:
                raise invalid_argument_error(env_name, raw, "expected an integer") from err
        return cls(**overrides)  # type: ignore[arg-type]
