from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LANGUAGE = "fr"
DEFAULT_USER_AGENT = "issue-publisher/0.1 (+https://gohugo.io)"
_PATH_FIELDS: tuple[str, ...] = ("content_dir", "log_dir", "event_path")


def _resolve_path(value: str | Path) -> Path:
    return Path(value).expanduser().resolve()


def _normalize_optional_text(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return None
    normalized = value.strip()
    if normalized:
        return normalized
    return None


class PublisherSettings(BaseSettings):
    """
    Runtime configuration for one publish run.

    Every option reads `ISSUE_PUBLISHER_<NAME>` from the environment (or `.env`),
    except the event path which follows the automation platform's
    `GITHUB_EVENT_PATH` convention.
    """

    model_config = SettingsConfigDict(
        env_prefix="ISSUE_PUBLISHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    event_path: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("event_path", "GITHUB_EVENT_PATH"),
        description="JSON file holding the issue event payload.",
    )
    content_dir: Path = Field(
        default=Path("."),
        description="Site root; bundles are written under `<content_dir>/content/`.",
    )
    default_language: str = Field(
        default=DEFAULT_LANGUAGE,
        description="Language code used when the issue form leaves `Language` blank.",
    )

    # Asset downloads.
    download_timeout_seconds: float = Field(
        default=30.0,
        description="Socket timeout applied to each image request.",
    )
    max_redirects: int = Field(
        default=5,
        description="Maximum redirect hops followed for one image before giving up.",
    )
    download_workers: int = Field(
        default=4,
        description="Thread pool size for concurrent image downloads.",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header sent to image hosts.",
    )

    # Logging.
    log_level: str = Field(
        default="INFO",
        description="Console log level.",
    )
    log_dir: Path | None = Field(
        default=None,
        description="When set, a JSON log file is also written to this directory.",
    )

    @field_validator("default_language", mode="before")
    @classmethod
    def _normalize_language(cls, value: Any) -> str:
        normalized = _normalize_optional_text(value)
        if normalized is None:
            return DEFAULT_LANGUAGE
        lowered = normalized.lower()
        if not re.fullmatch(r"[a-z]{2,3}(-[a-z0-9]{2,8})?", lowered):
            raise ValueError("ISSUE_PUBLISHER_DEFAULT_LANGUAGE must be a language code like 'fr'.")
        return lowered

    @field_validator("download_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("ISSUE_PUBLISHER_DOWNLOAD_TIMEOUT_SECONDS must be positive.")
        return value

    @field_validator("max_redirects")
    @classmethod
    def _validate_max_redirects(cls, value: int) -> int:
        if value < 0:
            raise ValueError("ISSUE_PUBLISHER_MAX_REDIRECTS must not be negative.")
        return value

    @field_validator("download_workers")
    @classmethod
    def _validate_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("ISSUE_PUBLISHER_DOWNLOAD_WORKERS must be at least 1.")
        return value

    @field_validator("user_agent", mode="before")
    @classmethod
    def _normalize_user_agent(cls, value: Any) -> str:
        normalized = _normalize_optional_text(value)
        return normalized or DEFAULT_USER_AGENT

    @field_validator("event_path", "log_dir", mode="before")
    @classmethod
    def _normalize_optional_path(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


def _load_yaml_overrides(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data


def _resolve_path_fields(settings: PublisherSettings) -> PublisherSettings:
    updates: dict[str, Path] = {}
    for field_name in _PATH_FIELDS:
        value = getattr(settings, field_name)
        if isinstance(value, Path):
            updates[field_name] = _resolve_path(value)
    return settings.model_copy(update=updates)


def load_settings(
    *,
    config_path: Path | None = None,
    **overrides: Any,
) -> PublisherSettings:
    """Build settings from the environment, an optional YAML file, then explicit overrides.

    Explicit overrides whose value is `None` are ignored so CLI options left unset
    do not mask environment values.
    """
    values: dict[str, Any] = {}
    if config_path is not None:
        values.update(_load_yaml_overrides(config_path))
    values.update({key: value for key, value in overrides.items() if value is not None})

    settings = PublisherSettings(**values)
    return _resolve_path_fields(settings)
