"""Sitemap generation from the feed document."""

from datetime import UTC, datetime
from pathlib import Path
from xml.sax.saxutils import escape

from dateutil import parser as date_parser

from .models import FeedDocument

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"


def to_lastmod(value: str | None) -> str | None:
    """Convert an ISO-8601 timestamp to an RFC3339 lastmod value in UTC."""
    if not value:
        return None
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC).isoformat(timespec="seconds")


def build_sitemap(document: FeedDocument, site_url: str) -> str:
    """Render the sitemap XML for the site root and every post."""
    site_url = site_url.rstrip("/")
    newest = document.posts[0].date if document.posts else None
    urls = [(f"{site_url}/", newest or datetime.now(UTC).isoformat())]

    for post in document.posts:
        if not post.slug:
            continue
        urls.append((f"{site_url}/articles/{post.slug}/", post.date))

    items = []
    for loc, date in urls:
        lastmod = to_lastmod(date)
        last = f"<lastmod>{lastmod}</lastmod>" if lastmod else ""
        items.append(f"<url><loc>{escape(loc)}</loc>{last}</url>")

    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<urlset xmlns="{SITEMAP_NAMESPACE}">'
        + "".join(items)
        + "</urlset>"
    )


def write_sitemap(document: FeedDocument, path: str | Path, site_url: str) -> int:
    """Write the sitemap file and return the number of URLs in it."""
    xml = build_sitemap(document, site_url)
    Path(path).write_text(xml, encoding="utf-8")
    return xml.count("<url>")
