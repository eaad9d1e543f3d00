"""Data models for the Obsidian News generator."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

DEFAULT_SITE_TITLE = "Obsidian News"
DEFAULT_SITE_DESCRIPTION = "Technology news, written daily."


@dataclass
class Candidate:
    """A syndication feed entry that may become a post."""

    title: str
    summary: str
    link: str
    date: datetime


@dataclass
class Article:
    """Drafted article returned by the language model."""

    title: str
    excerpt: str
    html: str


POST_FIELDS = ("id", "slug", "title", "date", "excerpt", "html")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class Post:
    """A published article record in the feed document."""

    id: str
    slug: str
    title: str
    date: str  # ISO-8601 UTC
    excerpt: str
    html: str
    # Stored JSON object, written back unchanged
    source: dict[str, Any] | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Post":
        """Build a Post from a stored JSON object, tolerating missing keys."""
        return cls(
            **{name: _text(data.get(name)) for name in POST_FIELDS},
            source=data,
        )

    def to_dict(self) -> dict[str, Any]:
        if self.source is not None:
            return dict(self.source)
        return {name: getattr(self, name) for name in POST_FIELDS}


@dataclass
class SiteInfo:
    """Site metadata shown by the front end."""

    title: str = DEFAULT_SITE_TITLE
    description: str = DEFAULT_SITE_DESCRIPTION
    source: dict[str, Any] | None = field(default=None, repr=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.source or {})
        data["title"] = self.title
        data["description"] = self.description
        return data


@dataclass
class FeedDocument:
    """The JSON document holding site metadata and posts, newest first."""

    site: SiteInfo = field(default_factory=SiteInfo)
    posts: list[Post] = field(default_factory=list)
    # Top-level keys besides site and posts are kept in place
    source: dict[str, Any] | None = field(default=None, repr=False, compare=False)

    def titles(self) -> set[str]:
        return {post.title for post in self.posts}

    def slugs(self) -> set[str]:
        return {post.slug for post in self.posts}

    def to_dict(self, max_posts: int | None = None) -> dict[str, Any]:
        posts = self.posts if max_posts is None else self.posts[:max_posts]
        data = dict(self.source or {})
        data["site"] = self.site.to_dict()
        data["posts"] = [post.to_dict() for post in posts]
        return data
