from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Union


class ContentCategory(str, Enum):
    NEWS = "news"
    COMPETITION = "competition"
    PLAYER = "player"
    POST = "post"
    GALLERY = "gallery"

    @property
    def folder(self) -> str:
        return _CATEGORY_FOLDERS[self]


_CATEGORY_FOLDERS: dict[ContentCategory, str] = {
    ContentCategory.NEWS: "news",
    ContentCategory.COMPETITION: "competitions",
    ContentCategory.PLAYER: "players",
    ContentCategory.POST: "posts",
    ContentCategory.GALLERY: "gallery",
}


class BareScalar(str):
    """A front matter value written without quotes (dates, numbers)."""


FrontMatterValue = Union[str, bool, list[str], BareScalar]


@dataclass
class ContentRecord:
    """Fields shared by every bundle; subclasses add the category-specific ones.

    `image_field` names the single-value attribute that may hold an external image
    and `image_stem` the local filename it is saved under.
    """

    category: ClassVar[ContentCategory]
    image_field: ClassVar[str | None] = None
    image_stem: ClassVar[str] = "image"

    title: str
    language: str
    content: str = ""

    @property
    def gallery_items(self) -> list[str] | None:
        return None

    def front_matter(self) -> list[tuple[str, FrontMatterValue]]:
        return []

    def lead_in(self) -> str:
        return ""

    def body(self) -> str:
        return self.content


def _present(items: list[tuple[str, FrontMatterValue]]) -> list[tuple[str, FrontMatterValue]]:
    return [(key, value) for key, value in items if isinstance(value, bool) or value]


@dataclass
class NewsRecord(ContentRecord):
    category: ClassVar[ContentCategory] = ContentCategory.NEWS
    image_field: ClassVar[str | None] = "cover"
    image_stem: ClassVar[str] = "cover"

    summary: str = ""
    cover: str = ""
    highlight: bool = False
    tags: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    gallery: list[str] = field(default_factory=list)

    @property
    def gallery_items(self) -> list[str] | None:
        return self.gallery

    def front_matter(self) -> list[tuple[str, FrontMatterValue]]:
        return _present(
            [
                ("highlight", self.highlight),
                ("summary", self.summary),
                ("cover", self.cover),
                ("tags", self.tags),
                ("categories", self.categories),
                ("gallery", self.gallery),
            ]
        )

    def lead_in(self) -> str:
        return f"{{{{< lead >}}}}{self.title}{{{{< /lead >}}}}"


@dataclass
class CompetitionRecord(ContentRecord):
    category: ClassVar[ContentCategory] = ContentCategory.COMPETITION
    image_field: ClassVar[str | None] = "cover"
    image_stem: ClassVar[str] = "cover"

    start_date: str = ""
    end_date: str = ""
    location: str = ""
    summary: str = ""
    cover: str = ""
    gallery: list[str] = field(default_factory=list)

    @property
    def gallery_items(self) -> list[str] | None:
        return self.gallery

    def front_matter(self) -> list[tuple[str, FrontMatterValue]]:
        return _present(
            [
                ("startDate", BareScalar(self.start_date)),
                ("endDate", BareScalar(self.end_date)),
                ("location", self.location),
                ("summary", self.summary),
                ("cover", self.cover),
                ("gallery", self.gallery),
            ]
        )


@dataclass
class PlayerRecord(ContentRecord):
    category: ClassVar[ContentCategory] = ContentCategory.PLAYER
    image_field: ClassVar[str | None] = "photo"
    image_stem: ClassVar[str] = "photo"

    name: str = ""
    gender: str = ""
    player_category: str = ""
    photo: str = ""

    def front_matter(self) -> list[tuple[str, FrontMatterValue]]:
        return _present(
            [
                ("name", self.name),
                ("gender", self.gender),
                ("category", self.player_category),
                ("photo", self.photo),
            ]
        )


@dataclass
class PostRecord(ContentRecord):
    category: ClassVar[ContentCategory] = ContentCategory.POST
    image_field: ClassVar[str | None] = "featured"
    image_stem: ClassVar[str] = "featured"

    summary: str = ""
    featured: str = ""
    tags: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)

    def front_matter(self) -> list[tuple[str, FrontMatterValue]]:
        return _present(
            [
                ("summary", self.summary),
                ("featured", self.featured),
                ("tags", self.tags),
                ("categories", self.categories),
            ]
        )


@dataclass
class GalleryRecord(ContentRecord):
    """A single captioned picture; the caption doubles as the page body."""

    category: ClassVar[ContentCategory] = ContentCategory.GALLERY
    image_field: ClassVar[str | None] = "image"
    image_stem: ClassVar[str] = "image"

    caption: str = ""
    image: str = ""

    def front_matter(self) -> list[tuple[str, FrontMatterValue]]:
        return _present(
            [
                ("image", self.image),
                ("caption", self.caption),
            ]
        )

    def body(self) -> str:
        return self.caption
