from __future__ import annotations

import logging
from datetime import date
from typing import ClassVar

from issue_publisher.models.content_records import (
    CompetitionRecord,
    ContentCategory,
    ContentRecord,
    GalleryRecord,
    NewsRecord,
    PlayerRecord,
    PostRecord,
)
from issue_publisher.models.issue_event import Issue
from issue_publisher.services.issue_form import IssueForm, slugify

LOGGER = logging.getLogger("issue_publisher.record_builder")

LANGUAGE_HEADING = "Language"
TITLE_HEADING = "Title"
SUMMARY_HEADING = "Summary (short)"
TAGS_HEADING = "Tags (comma separated)"
CATEGORIES_HEADING = "Categories (comma separated)"
GALLERY_HEADING = "Gallery images (comma separated, optional)"
COVER_HEADINGS: tuple[str, ...] = (
    "Cover image relative path (optional)",
    "Cover image filename or static path (optional)",
)
FEATURED_IMAGE_HEADING = "Featured image (optional)"
SLUG_FALLBACK = "item"


class RecordHandler:
    """Builds the record for one content category from an issue form."""

    category: ClassVar[ContentCategory]
    title_fallback: ClassVar[str] = "Untitled"

    def build(self, form: IssueForm, *, issue_title: str, language: str) -> ContentRecord:
        raise NotImplementedError

    def resolve_title(self, explicit: str, issue_title: str) -> str:
        return explicit or issue_title.strip() or self.title_fallback


class NewsHandler(RecordHandler):
    category = ContentCategory.NEWS

    def build(self, form: IssueForm, *, issue_title: str, language: str) -> ContentRecord:
        return NewsRecord(
            title=self.resolve_title(form.text(TITLE_HEADING), issue_title),
            language=language,
            content=form.markdown("Content (Markdown)"),
            summary=form.single_line(SUMMARY_HEADING),
            cover=form.text(*COVER_HEADINGS),
            highlight=form.flag("Highlight"),
            tags=form.items(TAGS_HEADING),
            categories=form.items(CATEGORIES_HEADING),
            gallery=form.items(GALLERY_HEADING),
        )


class CompetitionHandler(RecordHandler):
    category = ContentCategory.COMPETITION

    def build(self, form: IssueForm, *, issue_title: str, language: str) -> ContentRecord:
        return CompetitionRecord(
            title=self.resolve_title(form.text(TITLE_HEADING), issue_title),
            language=language,
            content=form.markdown("Description (Markdown)"),
            start_date=form.text("Start date (YYYY-MM-DD)"),
            end_date=form.text("End date (YYYY-MM-DD)"),
            location=form.text("Location"),
            summary=form.single_line(SUMMARY_HEADING),
            cover=form.text(*COVER_HEADINGS),
            gallery=form.items(GALLERY_HEADING),
        )


class PlayerHandler(RecordHandler):
    category = ContentCategory.PLAYER
    title_fallback = "Player"

    def build(self, form: IssueForm, *, issue_title: str, language: str) -> ContentRecord:
        name = form.text("Player full name")
        return PlayerRecord(
            title=self.resolve_title(name, issue_title),
            language=language,
            content=form.markdown("Bio / Notes (Markdown)"),
            name=name,
            gender=form.text("Gender"),
            player_category=form.text("Category"),
            photo=form.text("Photo relative path (optional)"),
        )


class PostHandler(RecordHandler):
    category = ContentCategory.POST

    def build(self, form: IssueForm, *, issue_title: str, language: str) -> ContentRecord:
        return PostRecord(
            title=self.resolve_title(form.text(TITLE_HEADING), issue_title),
            language=language,
            content=form.markdown("Content (Markdown)"),
            summary=form.single_line(SUMMARY_HEADING),
            featured=form.text(FEATURED_IMAGE_HEADING, *COVER_HEADINGS),
            tags=form.items(TAGS_HEADING),
            categories=form.items(CATEGORIES_HEADING),
        )


class GalleryHandler(RecordHandler):
    category = ContentCategory.GALLERY

    def build(self, form: IssueForm, *, issue_title: str, language: str) -> ContentRecord:
        return GalleryRecord(
            title=self.resolve_title(form.text(TITLE_HEADING), issue_title),
            language=language,
            caption=form.single_line("Caption"),
            image=form.text("Image"),
        )


HANDLERS: dict[ContentCategory, RecordHandler] = {
    handler.category: handler
    for handler in (
        NewsHandler(),
        CompetitionHandler(),
        PlayerHandler(),
        PostHandler(),
        GalleryHandler(),
    )
}


def resolve_language(form: IssueForm, default_language: str) -> str:
    # Used as a path segment.
    language = slugify(form.text(LANGUAGE_HEADING))
    return language or default_language


def build_record(
    category: ContentCategory,
    issue: Issue,
    *,
    default_language: str,
) -> ContentRecord:
    form = IssueForm(issue.body)
    record = HANDLERS[category].build(
        form,
        issue_title=issue.title,
        language=resolve_language(form, default_language),
    )
    LOGGER.debug(
        "record built category=%s title=%r language=%s",
        category.value,
        record.title,
        record.language,
    )
    return record


def build_slug(title: str, today: date) -> str:
    """`YYYY-MM-DD-<slug>`; titles with no sluggable characters become `item`."""
    return f"{today.isoformat()}-{slugify(title) or SLUG_FALLBACK}"
