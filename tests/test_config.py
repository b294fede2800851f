from __future__ import annotations

import random

import pytest

from commitart.config import DEFAULT_API_URL, ConfigError, Settings, load_settings


def test_defaults() -> None:
    settings = load_settings({})
    assert settings == Settings()
    assert settings.api_url == DEFAULT_API_URL

    policy = settings.retry_policy()
    assert (policy.timeout, policy.max_retries, policy.initial_delay, policy.jitter) == (10.0, 3, 1.0, 0.1)


def test_environment_values() -> None:
    settings = load_settings(
        {
            "COMMITART_API_URL": "https://art.example.com/api/",
            "COMMITART_TIMEOUT": "2.5",
            "COMMITART_MAX_RETRIES": "5",
            "COMMITART_RETRY_DELAY": "0.5",
            "COMMITART_RETRY_JITTER": "0",
            "COMMITART_LOG_LEVEL": "debug",
            "COMMITART_LOG_JSON": "true",
            "GITHUB_TOKEN": "gho_env",
        }
    )
    assert settings.api_url == "https://art.example.com/api"
    assert settings.timeout == 2.5
    assert settings.max_retries == 5
    assert settings.retry_delay == 0.5
    assert settings.retry_jitter == 0.0
    assert settings.log_level == "debug"
    assert settings.log_json is True
    assert settings.github_token == "gho_env"


@pytest.mark.parametrize(
    "env",
    [
        {"COMMITART_TIMEOUT": "soon"},
        {"COMMITART_TIMEOUT": "0"},
        {"COMMITART_MAX_RETRIES": "-1"},
        {"COMMITART_MAX_RETRIES": "2.5"},
        {"COMMITART_RETRY_DELAY": "-1"},
        {"COMMITART_RETRY_DELAY": "0"},
        {"COMMITART_RETRY_DELAY": "0.05", "COMMITART_RETRY_JITTER": "0.1"},
        {"COMMITART_RETRY_DELAY": "0.05", "COMMITART_RETRY_JITTER": "0.05"},
        {"COMMITART_RETRY_JITTER": "-0.1"},
        {"COMMITART_LOG_LEVEL": "chatty"},
    ],
)
def test_invalid_environment(env: dict[str, str]) -> None:
    with pytest.raises(ConfigError):
        load_settings(env)


def test_overrides_skip_none_and_reject_unknown_keys() -> None:
    base = load_settings({"GITHUB_TOKEN": "gho_env"})

    updated = base.with_overrides(api_url="https://other.example.com/api", github_token=None, max_retries=0)
    assert updated.api_url == "https://other.example.com/api"
    assert updated.github_token == "gho_env"
    assert updated.max_retries == 0

    with pytest.raises(ConfigError):
        base.with_overrides(colour="blue")
    with pytest.raises(ConfigError):
        base.with_overrides(timeout=-1.0)


def test_jitter_just_below_delay_keeps_delays_increasing() -> None:
    policy = load_settings({"COMMITART_RETRY_DELAY": "0.05", "COMMITART_RETRY_JITTER": "0.0499"}).retry_policy()
    rng = random.Random(3)
    for _ in range(1000):
        delays = [policy.delay_for(n, rng) for n in range(1, 5)]
        assert all(a < b for a, b in zip(delays, delays[1:]))
