from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

from issue_publisher.models.content_records import BareScalar, ContentRecord, FrontMatterValue

LOGGER = logging.getLogger("issue_publisher.emitter")

FRONT_MATTER_DELIMITER = "---"
INDEX_FILE_NAME = "index.md"

_BARE_SCALAR_RE = re.compile(r"\w[\w.:+-]*(?<!:)")


def quote(value: str) -> str:
    """Double-quote a single-line front matter value."""
    single_line = " ".join(value.splitlines())
    escaped = single_line.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_value(value: FrontMatterValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, BareScalar):
        # dates and timestamps only; anything else could open a new key
        if _BARE_SCALAR_RE.fullmatch(value):
            return str(value)
        return quote(value)
    if isinstance(value, list):
        return "[" + ", ".join(quote(item) for item in value) + "]"
    return quote(value)


def render_front_matter(record: ContentRecord, *, generated_at: datetime) -> str:
    lines = [
        FRONT_MATTER_DELIMITER,
        f"title: {quote(record.title)}",
        f"date: {generated_at.isoformat()}",
        "draft: false",
    ]
    for key, value in record.front_matter():
        lines.append(f"{key}: {format_value(value)}")
    lines.append(FRONT_MATTER_DELIMITER)
    return "\n".join(lines)


def render_document(record: ContentRecord, *, generated_at: datetime) -> str:
    front_matter = render_front_matter(record, generated_at=generated_at)
    lead_in = record.lead_in()
    separator = f"\n\n{lead_in}\n\n" if lead_in else "\n\n"
    return f"{front_matter}{separator}{record.body()}\n"


def bundle_dir_for(content_root: Path, record: ContentRecord, slug: str) -> Path:
    return content_root / "content" / record.language / record.category.folder / slug


def write_document(bundle_dir: Path, document: str) -> Path:
    """Write `index.md` into the bundle, replacing any file already at that path."""
    bundle_dir.mkdir(parents=True, exist_ok=True)
    path = bundle_dir / INDEX_FILE_NAME
    if path.exists():
        LOGGER.warning("overwriting existing bundle document path=%s", path)
    path.write_text(document, encoding="utf-8")
    return path
