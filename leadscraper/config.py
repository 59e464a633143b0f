"""Configuration utilities shared by the scraping pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from .targets import parse_state_list

DEFAULT_OUTPUT_FILE = Path("businesses.csv")
DEFAULT_DEDUPE_FILE = Path("dedupe.json")
DEFAULT_FETCH_PROXY_TEMPLATE = "https://api.allorigins.win/raw?url={url}"

_TRUE_VALUES = ("1", "true", "yes", "y", "on")


@dataclass(slots=True)
class RateLimitConfig:
    site_concurrency: int = 8
    per_request_delay: float = 0.15
    page_delay: float = 0.12
    path_delay: float = 0.12
    task_cooldown: float = 0.12


@dataclass(slots=True)
class RetryConfig:
    max_retries: int = 3
    base_delay: float = 1.0
    site_base_delay: float = 0.8


@dataclass(slots=True)
class TimeoutConfig:
    request_timeout: float = 15.0


@dataclass(slots=True)
class ScraperConfig:
    output_path: Path = DEFAULT_OUTPUT_FILE
    dedupe_path: Path = DEFAULT_DEDUPE_FILE
    serper_api_key: Optional[str] = None
    require_api_key: bool = False
    max_pages: int = 2
    dedupe_flush_interval: float = 60.0
    skip_website_crawl: bool = False
    emit_placeholder_rows: bool = True
    include_phone: bool = True
    fetch_proxy_template: Optional[str] = DEFAULT_FETCH_PROXY_TEMPLATE
    state_city_map: Optional[dict[str, list[str]]] = None
    categories: Optional[tuple[str, ...]] = None
    log_level: str = "INFO"
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)

    @property
    def has_api_key(self) -> bool:
        return bool(self.serper_api_key)

    def validate(self) -> None:
        """Raise ``ValueError`` when the configuration cannot drive a run."""

        if self.require_api_key and not self.has_api_key:
            raise ValueError("SERPER_API_KEY is required but not set")
        if self.max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        if self.rate_limit.site_concurrency < 1:
            raise ValueError("site concurrency must be at least 1")
        if self.retry.max_retries < 0:
            raise ValueError("max_retries must not be negative")
        if self.timeout.request_timeout <= 0:
            raise ValueError("request timeout must be positive")


def _env_str(env: Mapping[str, str], name: str) -> str | None:
    raw = env.get(name)
    if raw is None:
        return None
    cleaned = raw.strip()
    return cleaned or None


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = _env_str(env, name)
    if raw is None:
        return default
    return raw.lower() in _TRUE_VALUES


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = _env_str(env, name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid integer for {name}: {raw!r}") from exc


def _env_millis(env: Mapping[str, str], name: str, default: float) -> float:
    raw = _env_str(env, name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid millisecond value for {name}: {raw!r}") from exc
    return max(0.0, value) / 1000.0


def _env_seconds(env: Mapping[str, str], name: str, default: float) -> float:
    raw = _env_str(env, name)
    if raw is None:
        return default
    try:
        return max(0.0, float(raw))
    except ValueError as exc:
        raise ValueError(f"Invalid seconds value for {name}: {raw!r}") from exc


def parse_categories(raw_value: str | None) -> tuple[str, ...]:
    if not raw_value:
        return ()

    selected: list[str] = []
    for part in raw_value.split(","):
        category = part.strip()
        if not category or category in selected:
            continue
        selected.append(category)
    return tuple(selected)


def load_config_from_env(env: Mapping[str, str] | None = None) -> ScraperConfig:
    """Build a :class:`ScraperConfig` from environment-style key/value pairs."""

    env = os.environ if env is None else env
    config = ScraperConfig()

    output_file = _env_str(env, "OUTPUT_FILE")
    if output_file:
        config.output_path = Path(output_file)
    dedupe_file = _env_str(env, "DEDUPE_FILE")
    if dedupe_file:
        config.dedupe_path = Path(dedupe_file)

    config.serper_api_key = _env_str(env, "SERPER_API_KEY")
    config.require_api_key = _env_bool(env, "REQUIRE_API_KEY", config.require_api_key)
    config.max_pages = _env_int(env, "MAX_PAGES", config.max_pages)
    config.dedupe_flush_interval = _env_seconds(env, "DEDUPE_FLUSH_INTERVAL", config.dedupe_flush_interval)
    config.skip_website_crawl = _env_bool(
        env,
        "SKIP_WEBSITE_CRAWL",
        _env_bool(env, "SKIP_SCRAPING_IF_NO_WEBSITE", config.skip_website_crawl),
    )
    config.emit_placeholder_rows = _env_bool(env, "EMIT_PLACEHOLDER_ROWS", config.emit_placeholder_rows)
    config.include_phone = _env_bool(env, "INCLUDE_PHONE", config.include_phone)

    if "FETCH_PROXY_TEMPLATE" in env:
        config.fetch_proxy_template = _env_str(env, "FETCH_PROXY_TEMPLATE")

    config.state_city_map = parse_state_list(_env_str(env, "STATE_LIST"))
    categories = parse_categories(_env_str(env, "BUSINESS_TYPES"))
    config.categories = categories or None
    config.log_level = (_env_str(env, "LOG_LEVEL") or config.log_level).upper()

    config.rate_limit.site_concurrency = _env_int(env, "SITE_CONCURRENCY", config.rate_limit.site_concurrency)
    config.rate_limit.per_request_delay = _env_millis(
        env, "PER_REQUEST_DELAY_MS", config.rate_limit.per_request_delay
    )
    config.retry.max_retries = _env_int(env, "MAX_RETRIES", config.retry.max_retries)
    config.timeout.request_timeout = _env_millis(env, "REQUEST_TIMEOUT_MS", config.timeout.request_timeout)
    return config
