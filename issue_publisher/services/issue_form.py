"""Reading answers out of issue-form bodies.

Issue forms render each field as a `### <label>` heading followed by the answer.
Unanswered optional fields are rendered as `_No response_`.
"""

from __future__ import annotations

import re
import unicodedata

NO_RESPONSE = "_No response_"
SLUG_MAX_LENGTH = 80

_HEADING_RE = re.compile(r"^###\s+(.*)$")
_CODE_FENCE_RE = re.compile(r"\A```[^\n`]*\n(.*?)\n?```\Z", re.DOTALL)
_IMAGE_MARKDOWN_RE = re.compile(r"!\[([^\]]*)\]\((?:[^()]|\([^)]*\))*\)")
_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")
_CHECKED_BOX_RE = re.compile(r"^\s*[-*]\s*\[[xX]\]", re.MULTILINE)
_TRUTHY_ANSWERS: frozenset[str] = frozenset({"1", "true", "yes", "on", "oui"})


def _heading_key(text: str) -> str:
    return text.strip().casefold()


def extract_field(body: str, heading: str) -> str:
    """Return the trimmed answer under `### <heading>`, or "" when it is absent.

    The answer runs until the next `###` heading line. A `### ` line inside an
    answer, fenced or not, ends that answer early.
    """
    wanted = _heading_key(heading)
    collected: list[str] | None = None
    for line in body.splitlines():
        match = _HEADING_RE.match(line)
        if collected is not None:
            if match:
                break
            collected.append(line)
        elif match and _heading_key(match.group(1)) == wanted:
            collected = []
    if collected is None:
        return ""
    return "\n".join(collected).strip()


def suppress_placeholder(text: str) -> str:
    normalized = text.strip()
    if normalized == NO_RESPONSE:
        return ""
    return normalized


def parse_comma_list(text: str) -> list[str]:
    items = (item.strip() for item in text.split(","))
    return [item for item in items if item and item != NO_RESPONSE]


def unwrap_code_fence(text: str) -> str:
    """Strip a fence that wraps the whole answer (forms with `render:` do this)."""
    match = _CODE_FENCE_RE.match(text.strip())
    if match is None:
        return text
    inner = match.group(1)
    if any(line.lstrip().startswith("```") for line in inner.splitlines()):
        return text
    return inner


def strip_image_markdown(text: str) -> str:
    return _IMAGE_MARKDOWN_RE.sub(lambda match: match.group(1), text)


def parse_flag(text: str) -> bool:
    """Interpret a checkbox or yes/no answer."""
    normalized = suppress_placeholder(text)
    if not normalized:
        return False
    if _CHECKED_BOX_RE.search(normalized):
        return True
    return normalized.casefold() in _TRUTHY_ANSWERS


def slugify(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    slug = _NON_SLUG_RE.sub("-", stripped.lower()).strip("-")
    return slug[:SLUG_MAX_LENGTH].strip("-")


class IssueForm:
    """An issue body with typed accessors for its answers."""

    def __init__(self, body: str) -> None:
        self.body = body

    def text(self, *headings: str) -> str:
        """First non-empty answer among `headings`, placeholder suppressed."""
        for heading in headings:
            value = suppress_placeholder(extract_field(self.body, heading))
            if value:
                return value
        return ""

    def single_line(self, *headings: str) -> str:
        return strip_image_markdown(self.text(*headings)).strip()

    def markdown(self, heading: str) -> str:
        return unwrap_code_fence(self.text(heading))

    def items(self, heading: str) -> list[str]:
        return parse_comma_list(extract_field(self.body, heading))

    def flag(self, heading: str) -> bool:
        return parse_flag(extract_field(self.body, heading))
