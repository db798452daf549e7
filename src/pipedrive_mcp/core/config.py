from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .client import DEFAULT_BASE_URL
from .context import GatewaySession
from .errors import ConfigurationError

DEV_ENVS = {"dev", "local", "development"}


@dataclass(frozen=True)
class GatewayConfig:
    api_token: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 30.0
    log_level: str = "INFO"
    env: str = ""
    log_dir: str = "logs"

    @property
    def is_dev(self) -> bool:
        return self.env in DEV_ENVS

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.is_dev else self.log_level


def load_env_config(*, use_dotenv: bool = True) -> GatewayConfig:
    """Load gateway settings from the environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    timeout_raw = os.getenv("PIPEDRIVE_TIMEOUT_S", "").strip()
    try:
        timeout_seconds = float(timeout_raw) if timeout_raw else 30.0
    except ValueError as exc:
        raise ConfigurationError(
            f"PIPEDRIVE_TIMEOUT_S must be a number, got {timeout_raw!r}"
        ) from exc
    return GatewayConfig(
        api_token=os.getenv("PIPEDRIVE_API_TOKEN", "").strip(),
        base_url=os.getenv("PIPEDRIVE_BASE_URL", "").strip() or DEFAULT_BASE_URL,
        timeout_seconds=timeout_seconds,
        log_level=(os.getenv("LOG_LEVEL", "").strip() or "INFO").upper(),
        env=os.getenv("MCP_ENV", "").strip().lower(),
        log_dir=os.getenv("LOG_DIR", "").strip() or "logs",
    )


def create_session_from_env(
    cfg: GatewayConfig | None = None, **kwargs
) -> GatewaySession:
    """Create and initialize a GatewaySession from environment variables."""
    cfg = cfg or load_env_config()
    if not cfg.api_token:
        raise ConfigurationError("Missing PIPEDRIVE_API_TOKEN in environment.")
    session = GatewaySession()
    session.initialize(
        cfg.api_token,
        base_url=cfg.base_url,
        timeout_seconds=cfg.timeout_seconds,
        **kwargs,
    )
    return session


__all__ = ["GatewayConfig", "load_env_config", "create_session_from_env", "DEV_ENVS"]
