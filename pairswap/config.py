"""Configuration for the pairswap exchange core."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from pairswap.constants import DEFAULT_INIT_CODE_HASH, MINIMUM_LIQUIDITY


def _env_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class PairswapConfig:
    """Centralized configuration for the exchange and its API.

    Attributes:
        minimum_liquidity: Shares locked forever on a pair's first deposit
        init_code_hash: Namespace salt mixed into deterministic pair addresses
        api_host: Host the HTTP API binds to
        api_port: Port the HTTP API binds to
        api_reload: Enable uvicorn auto-reload (development only)
        log_level: Minimum structlog level name
        log_json: Render logs as JSON instead of the console renderer
    """

    minimum_liquidity: int = MINIMUM_LIQUIDITY
    init_code_hash: str = DEFAULT_INIT_CODE_HASH

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False

    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self) -> None:
        if self.minimum_liquidity <= 0:
            raise ValueError(f"minimum_liquidity must be positive, got {self.minimum_liquidity}")
        if not (self.init_code_hash.startswith("0x") and len(self.init_code_hash) == 66):
            raise ValueError(f"init_code_hash must be 0x + 64 hex chars: {self.init_code_hash}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> PairswapConfig:
        """Build a config from PAIRSWAP_* environment variables.

        Unset variables fall back to the dataclass defaults:
        - PAIRSWAP_MINIMUM_LIQUIDITY
        - PAIRSWAP_INIT_CODE_HASH
        - PAIRSWAP_HOST / PAIRSWAP_PORT / PAIRSWAP_RELOAD
        - PAIRSWAP_LOG_LEVEL / PAIRSWAP_LOG_JSON
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            minimum_liquidity=int(
                env.get("PAIRSWAP_MINIMUM_LIQUIDITY", str(defaults.minimum_liquidity))
            ),
            init_code_hash=env.get("PAIRSWAP_INIT_CODE_HASH", defaults.init_code_hash).lower(),
            api_host=env.get("PAIRSWAP_HOST", defaults.api_host),
            api_port=int(env.get("PAIRSWAP_PORT", str(defaults.api_port))),
            api_reload=_env_bool(env.get("PAIRSWAP_RELOAD", "false")),
            log_level=env.get("PAIRSWAP_LOG_LEVEL", defaults.log_level).upper(),
            log_json=_env_bool(env.get("PAIRSWAP_LOG_JSON", "false")),
        )


# Default configuration instance
DEFAULT_CONFIG = PairswapConfig()
