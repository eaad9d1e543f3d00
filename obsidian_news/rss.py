"""RSS feed aggregation for the Obsidian News generator."""

from datetime import UTC, datetime

import feedparser
import requests
from bs4 import BeautifulSoup
from dateutil import parser as date_parser

from .logging_config import create_execution_logger
from .models import Candidate

# Entry attributes tried in order for each candidate field
SUMMARY_FIELDS = ("summary", "description")
DATE_FIELDS = ("published", "updated", "created")


class FeedProcessor:
    """Fetches syndication feeds and normalizes entries into candidates."""

    def __init__(
        self,
        timeout: int = 30,
        session: requests.Session | None = None,
        execution_id: str | None = None,
    ):
        """Initialize FeedProcessor with configuration.

        Args:
            timeout: HTTP request timeout in seconds
            session: HTTP session to download feeds with
            execution_id: Execution ID for logging context
        """
        self.timeout = timeout
        self.feeds_processed = 0
        self.logger = create_execution_logger("feed_processor", execution_id)
        self.session = session or requests.Session()
        self.session.headers.update(
            {"User-Agent": "Obsidian-News/1.0 (+https://obsidian-news.com)"}
        )

        self.logger.info("FeedProcessor initialized", timeout=timeout)

    def fetch_candidates(self, feed_urls: list[str]) -> list[Candidate]:
        """Fetch every feed and merge the entries, newest first.

        A feed that fails to download or parse is logged and skipped.

        Args:
            feed_urls: List of RSS/Atom feed URLs to process

        Returns:
            Candidates from all feeds sorted by date, descending
        """
        self.logger.log_execution_start(feed_count=len(feed_urls))
        candidates = []
        feeds_processed = 0

        for feed_url in feed_urls:
            try:
                items = self.parse_feed(feed_url)
            except Exception as e:
                self.logger.error(
                    f"Failed to parse feed {feed_url}: {e}",
                    feed_url=feed_url,
                    error=str(e),
                )
                continue
            candidates.extend(items)
            feeds_processed += 1
            self.logger.info(
                f"Fetched {len(items)} candidates",
                feed_url=feed_url,
                items_count=len(items),
            )

        # sorted() is stable, so ties keep feed order
        candidates = sorted(candidates, key=lambda c: c.date, reverse=True)

        self.feeds_processed = feeds_processed
        self.logger.log_execution_end(
            success=True,
            feeds_processed=feeds_processed,
            total_items=len(candidates),
        )
        return candidates

    def parse_feed(self, feed_url: str) -> list[Candidate]:
        """Parse a single RSS/Atom feed.

        Args:
            feed_url: URL of the RSS/Atom feed

        Returns:
            List of Candidate objects from the feed

        Raises:
            requests.RequestException: If feed download fails
        """
        self.logger.info("Downloading feed content", feed_url=feed_url)
        response = self.session.get(feed_url, timeout=self.timeout)
        response.raise_for_status()

        feed = feedparser.parse(response.content)

        if feed.bozo and hasattr(feed, "bozo_exception"):
            self.logger.warning(
                f"Feed parsing warning for {feed_url}: {feed.bozo_exception}",
                feed_url=feed_url,
                bozo_exception=str(feed.bozo_exception),
            )

        items = []
        for entry in feed.entries:
            try:
                items.append(self.normalize_item(entry))
            except Exception as e:
                self.logger.warning(
                    f"Failed to normalize entry from {feed_url}: {e}",
                    feed_url=feed_url,
                    error=str(e),
                )

        self.logger.info(
            "Successfully parsed feed",
            feed_url=feed_url,
            items_count=len(items),
            total_entries=len(feed.entries),
        )
        return items

    def normalize_item(self, raw_item) -> Candidate:
        """Normalize a raw feed entry into a Candidate.

        Args:
            raw_item: Raw feed entry from feedparser

        Returns:
            Normalized Candidate object
        """
        title = getattr(raw_item, "title", None) or ""
        link = getattr(raw_item, "link", None) or ""

        content = ""
        for name in SUMMARY_FIELDS:
            value = getattr(raw_item, name, None)
            if value:
                content = value
                break
        else:
            # Atom feeds carry a list of content blocks
            raw_content = getattr(raw_item, "content", None)
            if isinstance(raw_content, list) and raw_content:
                content = raw_content[0].get("value", "")
            elif raw_content:
                content = str(raw_content)

        return Candidate(
            title=str(title),
            summary=self.clean_html_content(str(content)),
            link=str(link),
            date=self.parse_date(raw_item),
        )

    def parse_date(self, raw_item) -> datetime:
        """Return the first parseable entry timestamp, or now, in UTC."""
        for name in DATE_FIELDS:
            value = getattr(raw_item, name, None)
            if not value:
                continue
            try:
                parsed = date_parser.parse(str(value))
            except (ValueError, TypeError, OverflowError):
                continue
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=UTC)
            return parsed.astimezone(UTC)

        return datetime.now(UTC)

    def clean_html_content(self, content: str) -> str:
        """Remove HTML tags from content and normalize whitespace.

        Args:
            content: Raw content that may contain HTML

        Returns:
            Clean text content without HTML tags
        """
        if not content:
            return ""

        if "<" in content or ">" in content:
            soup = BeautifulSoup(content, "html.parser")
            for script in soup(["script", "style"]):
                script.decompose()
            content = soup.get_text(separator=" ")
            content = content.replace("<", "").replace(">", "")

        return " ".join(content.split())
