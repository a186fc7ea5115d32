from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

DEFAULT_METADATA_BASE_URL = "https://www.imdb.com"
DEFAULT_SEARCH_BASE_URL = "https://www.reddit.com"
DEFAULT_USER_AGENT = "reddit-discussion-redirector/1.0"


@dataclass(slots=True)
class AppConfig:
    host: str = "0.0.0.0"
    port: int = 7000
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: int = 20
    max_retries: int = 1
    max_workers: int = 8
    metadata_base_url: str = DEFAULT_METADATA_BASE_URL
    search_base_url: str = DEFAULT_SEARCH_BASE_URL
    log_level: str = "INFO"


def _int_env(name: str, fallback: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return fallback
    try:
        return int(raw)
    except ValueError:
        return fallback


def _read_toml(path: Path) -> dict:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def load_config(config_path: Path | None = None) -> AppConfig:
    file_path = config_path or Path("config.toml")
    raw = _read_toml(file_path)

    host = os.getenv("DISCUSSION_REDIRECTOR_HOST", raw.get("host", "0.0.0.0"))
    port = _int_env("PORT", int(raw.get("port", 7000)))
    user_agent = os.getenv(
        "DISCUSSION_REDIRECTOR_USER_AGENT", raw.get("user_agent", DEFAULT_USER_AGENT)
    )
    timeout_seconds = _int_env(
        "DISCUSSION_REDIRECTOR_TIMEOUT_SECONDS", int(raw.get("timeout_seconds", 20))
    )
    max_retries = _int_env("DISCUSSION_REDIRECTOR_MAX_RETRIES", int(raw.get("max_retries", 1)))
    max_workers = _int_env("DISCUSSION_REDIRECTOR_MAX_WORKERS", int(raw.get("max_workers", 8)))
    metadata_base_url = os.getenv(
        "DISCUSSION_REDIRECTOR_METADATA_BASE_URL",
        raw.get("metadata_base_url", DEFAULT_METADATA_BASE_URL),
    )
    search_base_url = os.getenv(
        "DISCUSSION_REDIRECTOR_SEARCH_BASE_URL",
        raw.get("search_base_url", DEFAULT_SEARCH_BASE_URL),
    )
    log_level = os.getenv("DISCUSSION_REDIRECTOR_LOG_LEVEL", raw.get("log_level", "INFO"))

    return AppConfig(
        host=host,
        port=port,
        user_agent=user_agent,
        timeout_seconds=max(timeout_seconds, 1),
        max_retries=max(max_retries, 1),
        max_workers=max(max_workers, 1),
        metadata_base_url=metadata_base_url.rstrip("/"),
        search_base_url=search_base_url.rstrip("/"),
        log_level=log_level.upper(),
    )
