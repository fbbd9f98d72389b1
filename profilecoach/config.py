import os
from dataclasses import dataclass
from typing import Optional


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    gemini_api_key: Optional[str]
    gemini_model: str
    gemini_temperature: float
    gemini_timeout: float
    profile_api_url: Optional[str]
    profile_api_host: Optional[str]
    profile_api_key: Optional[str]
    profile_api_timeout: float
    upstream_max_retries: int
    upstream_retry_backoff: float
    rate_limit_per_ip: str
    max_narrative_chars: int
    log_level: str


def load_settings() -> Settings:
    """Read settings from the environment.

    Called per request rather than cached at import so a changed environment
    (or ``monkeypatch.setenv`` in tests) takes effect immediately.
    """
    return Settings(
        gemini_api_key=_get_env("GEMINI_API_KEY"),
        gemini_model=_get_env("GEMINI_MODEL", "gemini-2.5-flash"),
        gemini_temperature=_get_env_float("GEMINI_TEMPERATURE", 0.4),
        gemini_timeout=_get_env_float("GEMINI_TIMEOUT", 60.0),
        profile_api_url=_get_env("PROFILE_API_URL"),
        profile_api_host=_get_env("PROFILE_API_HOST"),
        profile_api_key=_get_env("PROFILE_API_KEY"),
        profile_api_timeout=_get_env_float("PROFILE_API_TIMEOUT", 20.0),
        upstream_max_retries=max(0, _get_env_int("UPSTREAM_MAX_RETRIES", 2)),
        upstream_retry_backoff=max(0.0, _get_env_float("UPSTREAM_RETRY_BACKOFF", 1.0)),
        rate_limit_per_ip=_get_env("RATE_LIMIT_PER_IP", "5/hour"),
        max_narrative_chars=_get_env_int("MAX_NARRATIVE_CHARS", 50_000),
        log_level=_get_env("LOG_LEVEL", "INFO").upper(),
    )
