from __future__ import annotations

import os

import pytest

from warehouse_scan_sdk.config import ClientConfig, ConfigError, load_config

_ENV_VARS = (
    "WHSCAN_ENV",
    "WHSCAN_API_BASE_URL",
    "WHSCAN_API_BASE_URL_DEV",
    "WHSCAN_API_PREFIX",
    "WHSCAN_CONNECT_TIMEOUT_SECONDS",
    "WHSCAN_LOOKUP_TIMEOUT_SECONDS",
    "WHSCAN_COMMIT_TIMEOUT_SECONDS",
    "WHSCAN_RETRIES",
    "WHSCAN_RETRY_BACKOFF_SECONDS",
    "WHSCAN_MAX_CONNECTIONS",
    "WHSCAN_VERIFY_SSL",
    "WHSCAN_WORKFLOW",
    "WHSCAN_DEFAULT_WAREHOUSE_ID",
    "WHSCAN_DEFAULT_ACCOUNT_ID",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_load_config_requires_base_url() -> None:
    with pytest.raises(ConfigError, match="WHSCAN_API_BASE_URL"):
        load_config()


def test_load_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WHSCAN_API_BASE_URL", "https://api.example.com/")

    cfg = load_config()

    assert cfg.env_name == "dev"
    assert cfg.api_base_url == "https://api.example.com"
    assert cfg.api_prefix == "/api/v1"
    assert cfg.retries == 3
    assert cfg.verify_ssl is True
    assert cfg.default_workflow == "order"
    assert cfg.default_context() is None


def test_load_config_profile(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WHSCAN_ENV", "staging")
    monkeypatch.setenv("WHSCAN_API_BASE_URL", "https://fallback.example.com")
    monkeypatch.setenv("WHSCAN_API_BASE_URL_STAGING", "https://staging.example.com")

    cfg = load_config()

    assert cfg.api_base_url == "https://staging.example.com"
    assert cfg.env_name == "staging"


def test_lookups_and_commits_get_separate_timeouts(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WHSCAN_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("WHSCAN_CONNECT_TIMEOUT_SECONDS", "2")
    monkeypatch.setenv("WHSCAN_LOOKUP_TIMEOUT_SECONDS", "4")
    monkeypatch.setenv("WHSCAN_COMMIT_TIMEOUT_SECONDS", "45")

    cfg = load_config()

    assert cfg.timeout_for("get") == (2.0, 4.0)
    assert cfg.timeout_for("POST") == (2.0, 45.0)
    assert cfg.timeout_for("PUT") == (2.0, 45.0)


def test_station_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WHSCAN_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("WHSCAN_WORKFLOW", "Stock_Correction")
    monkeypatch.setenv("WHSCAN_DEFAULT_WAREHOUSE_ID", " WH-7 ")

    cfg = load_config()

    assert cfg.default_workflow == "stock_correction"
    context = cfg.default_context()
    assert context is not None
    assert context.warehouse_id == "WH-7"
    assert context.account_id is None


def test_unknown_workflow_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WHSCAN_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("WHSCAN_WORKFLOW", "picking")

    with pytest.raises(ConfigError, match="WHSCAN_WORKFLOW"):
        load_config()


@pytest.mark.parametrize(("raw", "expected"), [("services/rest/", "/services/rest"), ("", "")])
def test_load_config_normalizes_prefix(monkeypatch: pytest.MonkeyPatch, raw: str, expected: str) -> None:
    monkeypatch.setenv("WHSCAN_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("WHSCAN_API_PREFIX", raw)

    assert load_config().api_prefix == expected


def test_load_config_reads_env_file(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("WHSCAN_API_BASE_URL=https://file.example.com\nWHSCAN_VERIFY_SSL=false\n")
    monkeypatch.setenv("WHSCAN_RETRIES", "1")

    try:
        cfg = load_config(str(env_file))
    finally:
        # load_dotenv writes straight into os.environ.
        os.environ.pop("WHSCAN_API_BASE_URL", None)
        os.environ.pop("WHSCAN_VERIFY_SSL", None)

    assert cfg.api_base_url == "https://file.example.com"
    assert cfg.verify_ssl is False
    assert cfg.retries == 1


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("WHSCAN_CONNECT_TIMEOUT_SECONDS", "0"),
        ("WHSCAN_LOOKUP_TIMEOUT_SECONDS", "0"),
        ("WHSCAN_COMMIT_TIMEOUT_SECONDS", "-5"),
        ("WHSCAN_RETRIES", "-1"),
        ("WHSCAN_RETRY_BACKOFF_SECONDS", "-0.1"),
        ("WHSCAN_MAX_CONNECTIONS", "0"),
        ("WHSCAN_RETRIES", "abc"),
        ("WHSCAN_RETRIES", "1.5"),
        ("WHSCAN_LOOKUP_TIMEOUT_SECONDS", "soon"),
        ("WHSCAN_VERIFY_SSL", "maybe"),
    ],
)
def test_load_config_rejects_invalid_values(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv("WHSCAN_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv(key, value)

    with pytest.raises(ConfigError, match=key):
        load_config()


def test_zero_retry_backoff_is_allowed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WHSCAN_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("WHSCAN_RETRY_BACKOFF_SECONDS", "0")

    assert load_config().retry_backoff_seconds == 0.0
    assert ClientConfig(env_name="x", api_base_url="https://x").commit_timeout_seconds == 30.0
