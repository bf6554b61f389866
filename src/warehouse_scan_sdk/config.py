from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, TypeVar

from dotenv import load_dotenv

from .models import CommitContext
from .workflows import WORKFLOWS

ENV_PREFIX = "WHSCAN_"
MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

Number = TypeVar("Number", int, float)


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    """Backend connection settings plus the defaults a scanning station starts with.

    Lookups and commits get separate read timeouts: a scan should fail fast, while a
    batch commit may legitimately take a while on the server.
    """

    env_name: str
    api_base_url: str
    api_prefix: str = "/api/v1"
    connect_timeout_seconds: float = 5.0
    lookup_timeout_seconds: float = 10.0
    commit_timeout_seconds: float = 30.0
    retries: int = 3
    retry_backoff_seconds: float = 0.3
    max_connections: int = 10
    verify_ssl: bool = True
    default_workflow: str = "order"
    default_warehouse_id: str | None = None
    default_account_id: str | None = None

    def timeout_for(self, method: str) -> tuple[float, float]:
        read = self.commit_timeout_seconds if method.upper() in MUTATING_METHODS else self.lookup_timeout_seconds
        return self.connect_timeout_seconds, read

    def default_context(self) -> CommitContext | None:
        if not (self.default_warehouse_id or self.default_account_id):
            return None
        return CommitContext(warehouse_id=self.default_warehouse_id, account_id=self.default_account_id)


def _env(name: str) -> str | None:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _number(name: str, cast: Callable[[str], Number], default: Number, *, minimum: Number, inclusive: bool) -> Number:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ConfigError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from exc
    if value < minimum or (value == minimum and not inclusive):
        bound = ">=" if inclusive else ">"
        raise ConfigError(f"{ENV_PREFIX}{name} must be {bound} {minimum}, got {value}")
    return value


def _flag(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise ConfigError(f"{ENV_PREFIX}{name} must be a boolean, got {raw!r}")


def _api_prefix() -> str:
    raw = os.getenv(ENV_PREFIX + "API_PREFIX")
    if raw is None:
        return ClientConfig.api_prefix
    stripped = raw.strip().strip("/")
    return f"/{stripped}" if stripped else ""


def _workflow() -> str:
    name = (_env("WORKFLOW") or ClientConfig.default_workflow).lower()
    if name not in WORKFLOWS:
        choices = ", ".join(sorted(WORKFLOWS))
        raise ConfigError(f"{ENV_PREFIX}WORKFLOW must be one of {choices}, got {name!r}")
    return name


def load_config(env_file: str | None = None) -> ClientConfig:
    """Read ``WHSCAN_*`` settings, after loading ``env_file`` (or a found ``.env``)."""
    load_dotenv(env_file)

    env_name = _env("ENV") or "dev"
    # The per-profile URL wins; there is no built-in backend.
    base_url = _env(f"API_BASE_URL_{env_name.upper()}") or _env("API_BASE_URL")
    if base_url is None:
        raise ConfigError(f"{ENV_PREFIX}API_BASE_URL is not set and no {ENV_PREFIX}API_BASE_URL_{env_name.upper()} given")

    return ClientConfig(
        env_name=env_name,
        api_base_url=base_url.rstrip("/"),
        api_prefix=_api_prefix(),
        connect_timeout_seconds=_number("CONNECT_TIMEOUT_SECONDS", float, 5.0, minimum=0.0, inclusive=False),
        lookup_timeout_seconds=_number("LOOKUP_TIMEOUT_SECONDS", float, 10.0, minimum=0.0, inclusive=False),
        commit_timeout_seconds=_number("COMMIT_TIMEOUT_SECONDS", float, 30.0, minimum=0.0, inclusive=False),
        retries=_number("RETRIES", int, 3, minimum=0, inclusive=True),
        retry_backoff_seconds=_number("RETRY_BACKOFF_SECONDS", float, 0.3, minimum=0.0, inclusive=True),
        max_connections=_number("MAX_CONNECTIONS", int, 10, minimum=1, inclusive=True),
        verify_ssl=_flag("VERIFY_SSL", True),
        default_workflow=_workflow(),
        default_warehouse_id=_env("DEFAULT_WAREHOUSE_ID"),
        default_account_id=_env("DEFAULT_ACCOUNT_ID"),
    )
