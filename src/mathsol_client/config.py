from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError
from .project_constants import (
    API_DOMAIN,
    CLAIM_THRESHOLD,
    CLUSTER_ENDPOINTS,
    DEFAULT_CLUSTER,
    DRAW_DELAY_S,
    DRAW_ITERATIONS,
    KEY_FILE,
)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    cluster: str
    rpc_url: str
    api_url: str
    key_file: str
    draw_iterations: int = DRAW_ITERATIONS
    draw_delay_s: float = DRAW_DELAY_S
    claim_threshold: int = CLAIM_THRESHOLD

    @staticmethod
    def from_env(
        cluster_override: str | None = None,
        rpc_url_override: str | None = None,
        key_file_override: str | None = None,
    ) -> "Settings":
        load_dotenv(find_dotenv(usecwd=True))

        cluster = (cluster_override or os.getenv("MATHSOL_CLUSTER", "") or DEFAULT_CLUSTER).strip()
        if cluster not in CLUSTER_ENDPOINTS:
            raise ConfigError(
                f"Unknown cluster {cluster!r}; expected one of {', '.join(CLUSTER_ENDPOINTS)}."
            )

        # If user provides --rpc-url, trust it.
        rpc_url = rpc_url_override or os.getenv("RPC_URL", "").strip() or CLUSTER_ENDPOINTS[cluster]

        api_url = os.getenv("MATHSOL_API_URL", "").strip() or API_DOMAIN
        key_file = key_file_override or os.getenv("MATHSOL_KEY_FILE", "").strip() or KEY_FILE

        return Settings(
            cluster=cluster,
            rpc_url=rpc_url,
            api_url=api_url.rstrip("/"),
            key_file=key_file,
            draw_iterations=_env_int("DRAW_ITERATIONS", DRAW_ITERATIONS),
            draw_delay_s=_env_float("DRAW_DELAY_S", DRAW_DELAY_S),
            claim_threshold=_env_int("CLAIM_THRESHOLD", CLAIM_THRESHOLD),
        )
