from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any, cast

import yaml

from issue_publisher.models.content_records import (
    CompetitionRecord,
    GalleryRecord,
    NewsRecord,
    PlayerRecord,
    PostRecord,
)
from issue_publisher.services.document_emitter import (
    bundle_dir_for,
    quote,
    render_document,
    write_document,
)

GENERATED_AT = datetime(2026, 10, 18, 9, 30, tzinfo=UTC)


def _split(document: str) -> tuple[dict[str, Any], str]:
    assert document.startswith("---\n")
    _, front_matter, body = document.split("---\n", 2)
    return cast(dict[str, Any], yaml.safe_load(front_matter)), body


def test_news_document_has_lead_in_and_quoted_title() -> None:
    record = NewsRecord(title="Hello", language="fr", summary="World", content="Body")
    document = render_document(record, generated_at=GENERATED_AT)

    assert 'title: "Hello"' in document.splitlines()
    assert "date: 2026-10-18T09:30:00+00:00" in document.splitlines()
    assert "draft: false" in document.splitlines()
    assert "highlight: false" in document.splitlines()
    assert document.endswith("---\n\n{{< lead >}}Hello{{< /lead >}}\n\nBody\n")


def test_news_front_matter_keys_in_order_and_empty_values_omitted() -> None:
    record = NewsRecord(
        title="T",
        language="fr",
        summary="S",
        cover="cover.png",
        highlight=True,
        tags=["a"],
        gallery=["gallery-1.png"],
    )
    document = render_document(record, generated_at=GENERATED_AT)
    keys = [line.split(":", 1)[0] for line in document.split("---\n")[1].splitlines()]

    assert keys == ["title", "date", "draft", "highlight", "summary", "cover", "tags", "gallery"]


def test_list_values_round_trip_through_yaml() -> None:
    record = PostRecord(title="T", language="fr", tags=["x", "y"], categories=['say "hi"', "b\\c"])
    front_matter, _ = _split(render_document(record, generated_at=GENERATED_AT))

    assert front_matter["tags"] == ["x", "y"]
    assert front_matter["categories"] == ['say "hi"', "b\\c"]
    assert 'tags: ["x", "y"]' in render_document(record, generated_at=GENERATED_AT)


def test_quotes_are_escaped_and_lines_folded() -> None:
    assert quote('The "best" club') == '"The \\"best\\" club"'
    assert quote("two\nlines") == '"two lines"'

    record = CompetitionRecord(
        title='Cup "A"',
        language="fr",
        location='Salle "B"',
        summary="line one\nline two",
        start_date="2026-03-01",
    )
    front_matter, body = _split(render_document(record, generated_at=GENERATED_AT))

    assert front_matter["title"] == 'Cup "A"'
    assert front_matter["location"] == 'Salle "B"'
    assert front_matter["summary"] == "line one line two"
    assert "endDate" not in front_matter
    assert body == "\n\n"


def test_competition_dates_are_written_bare() -> None:
    record = CompetitionRecord(title="C", language="fr", start_date="2026-03-01", end_date="2026-03-02")
    document = render_document(record, generated_at=GENERATED_AT)

    assert "startDate: 2026-03-01" in document.splitlines()
    assert "endDate: 2026-03-02" in document.splitlines()


def test_player_front_matter() -> None:
    record = PlayerRecord(
        title="Jeanne",
        language="fr",
        name="Jeanne",
        gender="F",
        player_category="Senior",
        photo="photo.jpg",
        content="Bio",
    )
    front_matter, body = _split(render_document(record, generated_at=GENERATED_AT))

    assert {key: front_matter[key] for key in ("name", "gender", "category", "photo")} == {
        "name": "Jeanne",
        "gender": "F",
        "category": "Senior",
        "photo": "photo.jpg",
    }
    assert body == "\nBio\n"


def test_gallery_caption_is_the_body() -> None:
    record = GalleryRecord(title="G", language="fr", caption="Sunset", image="image.png")
    front_matter, body = _split(render_document(record, generated_at=GENERATED_AT))

    assert front_matter["image"] == "image.png"
    assert front_matter["caption"] == "Sunset"
    assert body == "\nSunset\n"


def test_bundle_dir_layout(tmp_path: Path) -> None:
    record = CompetitionRecord(title="C", language="en")
    assert bundle_dir_for(tmp_path, record, "2026-10-18-c") == (
        tmp_path / "content" / "en" / "competitions" / "2026-10-18-c"
    )


def test_write_document_creates_parents_and_replaces_existing(tmp_path: Path) -> None:
    bundle_dir = tmp_path / "content" / "fr" / "news" / "slug"
    path = write_document(bundle_dir, "first\n")
    assert path == bundle_dir / "index.md"

    write_document(bundle_dir, "second\n")
    assert path.read_text(encoding="utf-8") == "second\n"


def test_multiline_date_answer_cannot_add_front_matter_keys() -> None:
    record = CompetitionRecord(
        title="C",
        language="fr",
        start_date="2026-03-01\ndraft: true",
        end_date="2026-03-02T18:00:00+01:00",
    )
    document = render_document(record, generated_at=GENERATED_AT)
    front_matter, _ = _split(document)

    assert document.count("draft:") == 1
    assert front_matter["draft"] is False
    assert 'startDate: "2026-03-01 draft: true"' in document.splitlines()
    assert "endDate: 2026-03-02T18:00:00+01:00" in document.splitlines()
