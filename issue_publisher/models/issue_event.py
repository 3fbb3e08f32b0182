from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _label_name(value: object) -> str | None:
    if isinstance(value, str):
        name = value
    elif isinstance(value, dict):
        name = value.get("name")
    else:
        return None
    if not isinstance(name, str):
        return None
    normalized = name.strip()
    return normalized or None


class Issue(BaseModel):
    """The subset of an issue the publisher reads."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    title: str = ""
    body: str = ""
    labels: list[str] = Field(default_factory=list)

    @field_validator("title", "body", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        if value is None:
            return ""
        return value

    @field_validator("labels", mode="before")
    @classmethod
    def _normalize_labels(cls, value: object) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("issue.labels must be a list")
        names = (_label_name(item) for item in value)
        return [name for name in names if name is not None]


class IssueEvent(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    issue: Issue | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> IssueEvent:
        return cls.model_validate(payload)

    @classmethod
    def load(cls, path: Path) -> IssueEvent:
        """Read an event payload file; malformed JSON raises `json.JSONDecodeError`."""
        payload = json.loads(path.read_text(encoding="utf-8"))
        return cls.from_payload(payload)
