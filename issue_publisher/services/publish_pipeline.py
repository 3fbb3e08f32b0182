from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import structlog

from issue_publisher.config import PublisherSettings
from issue_publisher.errors import ConfigurationError, NotApplicableEvent
from issue_publisher.models.content_records import ContentCategory
from issue_publisher.models.issue_event import IssueEvent
from issue_publisher.services.asset_materializer import AssetMaterializer, ImageFetcher
from issue_publisher.services.category_classifier import classify
from issue_publisher.services.document_emitter import (
    bundle_dir_for,
    render_document,
    write_document,
)
from issue_publisher.services.record_builder import build_record, build_slug

LOGGER = structlog.get_logger("issue_publisher.pipeline")


def _local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class PublishResult:
    path: Path
    category: ContentCategory
    slug: str
    images_attempted: int
    images_saved: int


class PublishPipeline:
    """Turns one issue event into one content bundle."""

    def __init__(
        self,
        *,
        content_dir: Path,
        default_language: str,
        materializer: AssetMaterializer,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self._content_dir = content_dir
        self._default_language = default_language
        self._materializer = materializer
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: PublisherSettings) -> PublishPipeline:
        fetcher = ImageFetcher(
            timeout_seconds=settings.download_timeout_seconds,
            max_redirects=settings.max_redirects,
            user_agent=settings.user_agent,
        )
        return cls(
            content_dir=settings.content_dir,
            default_language=settings.default_language,
            materializer=AssetMaterializer(fetcher, max_workers=settings.download_workers),
        )

    def run(self, event: IssueEvent) -> PublishResult:
        issue = event.issue
        if issue is None:
            raise NotApplicableEvent("No issue in event payload")

        category = classify(issue.labels)
        record = build_record(category, issue, default_language=self._default_language)

        generated_at = self._clock()
        slug = build_slug(record.title, generated_at.date())
        bundle_dir = bundle_dir_for(self._content_dir, record, slug)
        log = LOGGER.bind(category=category.value, slug=slug, language=record.language)

        report = self._materializer.materialize(record, bundle_dir)
        path = write_document(bundle_dir, render_document(record, generated_at=generated_at))
        log.info("bundle written", path=str(path), images_saved=report.saved)

        return PublishResult(
            path=path,
            category=category,
            slug=slug,
            images_attempted=report.attempted,
            images_saved=report.saved,
        )


def load_event(settings: PublisherSettings) -> IssueEvent:
    if settings.event_path is None:
        raise ConfigurationError("GITHUB_EVENT_PATH not set")
    return IssueEvent.load(settings.event_path)


def publish(settings: PublisherSettings) -> PublishResult:
    event = load_event(settings)
    with structlog.contextvars.bound_contextvars(event_path=str(settings.event_path)):
        return PublishPipeline.from_settings(settings).run(event)
