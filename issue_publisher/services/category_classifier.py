from __future__ import annotations

import logging
from collections.abc import Iterable

from issue_publisher.errors import NotApplicableEvent
from issue_publisher.models.content_records import ContentCategory

LOGGER = logging.getLogger("issue_publisher.classifier")

TYPE_LABEL_PREFIX = "type:"

_KIND_TO_CATEGORY: dict[str, ContentCategory] = {
    "news": ContentCategory.NEWS,
    "competition": ContentCategory.COMPETITION,
    "player": ContentCategory.PLAYER,
    "post": ContentCategory.POST,
    "gallery": ContentCategory.GALLERY,
}


class UnclassifiedIssue(NotApplicableEvent):
    """No `type:` label, or one naming a kind this site does not publish."""

    def __init__(self, message: str, *, kind: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind


def find_type_label(labels: Iterable[str]) -> str | None:
    for label in labels:
        if label.startswith(TYPE_LABEL_PREFIX):
            return label
    return None


def classify(labels: Iterable[str]) -> ContentCategory:
    label = find_type_label(labels)
    if label is None:
        raise UnclassifiedIssue("No type: label found")

    kind = label.split(":", 1)[1].strip().casefold()
    category = _KIND_TO_CATEGORY.get(kind)
    if category is None:
        raise UnclassifiedIssue(f"Unknown section for type label: {kind}", kind=kind)

    LOGGER.debug("classified label=%s category=%s", label, category.value)
    return category
