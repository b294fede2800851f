"""
config.py

Responsibility: resolve runtime settings for the automation client.

Precedence (highest first): explicit overrides (CLI flags, job file) ->
environment variables -> defaults.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from commitart.executor import RetryPolicy


class ConfigError(ValueError):
    pass


DEFAULT_API_URL = "http://localhost:3000/api"

ENV_API_URL = "COMMITART_API_URL"
ENV_TIMEOUT = "COMMITART_TIMEOUT"
ENV_MAX_RETRIES = "COMMITART_MAX_RETRIES"
ENV_RETRY_DELAY = "COMMITART_RETRY_DELAY"
ENV_RETRY_JITTER = "COMMITART_RETRY_JITTER"
ENV_LOG_LEVEL = "COMMITART_LOG_LEVEL"
ENV_LOG_JSON = "COMMITART_LOG_JSON"
ENV_GITHUB_TOKEN = "GITHUB_TOKEN"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    timeout: float = 10.0
    max_retries: int = 3
    retry_delay: float = 1.0
    retry_jitter: float = 0.1
    log_level: str = "INFO"
    log_json: bool | None = None
    github_token: str = ""

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            timeout=self.timeout,
            max_retries=self.max_retries,
            initial_delay=self.retry_delay,
            jitter=self.retry_jitter,
        )

    def with_overrides(self, **overrides: Any) -> Settings:
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(values) - set(self.__dataclass_fields__)
        if unknown:
            raise ConfigError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        return _checked(replace(self, **values))


def _number(env: Mapping[str, str], key: str, cast: type, default: Any) -> Any:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{key} must be a {cast.__name__}, got {raw!r}") from e


def _flag(env: Mapping[str, str], key: str) -> bool | None:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _checked(settings: Settings) -> Settings:
    if settings.timeout <= 0:
        raise ConfigError(f"timeout must be positive, got {settings.timeout}")
    if settings.max_retries < 0:
        raise ConfigError(f"max_retries must be >= 0, got {settings.max_retries}")
    if settings.retry_delay <= 0:
        raise ConfigError(f"retry_delay must be positive, got {settings.retry_delay}")
    if not (0 <= settings.retry_jitter < settings.retry_delay):
        raise ConfigError(
            f"retry_jitter must be >= 0 and below retry_delay ({settings.retry_delay}), got {settings.retry_jitter}"
        )
    if not settings.api_url.strip():
        raise ConfigError("api_url must not be empty")
    if settings.log_level.upper() not in _LOG_LEVELS:
        raise ConfigError(f"Unknown log level: {settings.log_level}")
    return settings


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environment variables (os.environ by default)."""
    env = os.environ if env is None else env
    return _checked(
        Settings(
            api_url=(env.get(ENV_API_URL) or DEFAULT_API_URL).rstrip("/"),
            timeout=_number(env, ENV_TIMEOUT, float, 10.0),
            max_retries=_number(env, ENV_MAX_RETRIES, int, 3),
            retry_delay=_number(env, ENV_RETRY_DELAY, float, 1.0),
            retry_jitter=_number(env, ENV_RETRY_JITTER, float, 0.1),
            log_level=env.get(ENV_LOG_LEVEL) or "INFO",
            log_json=_flag(env, ENV_LOG_JSON),
            github_token=env.get(ENV_GITHUB_TOKEN) or "",
        )
    )
