"""Feed document persistence for the Obsidian News generator."""

import json
from pathlib import Path

from .logging_config import create_execution_logger
from .models import FeedDocument, Post, SiteInfo

MAX_POSTS = 500


class FeedStore:
    """Reads and rewrites the JSON feed document."""

    def __init__(
        self,
        path: str | Path,
        max_posts: int = MAX_POSTS,
        execution_id: str | None = None,
    ):
        """Initialize the store.

        Args:
            path: Location of the feed document
            max_posts: Number of newest posts kept on save
            execution_id: Execution ID for logging context
        """
        self.path = Path(path)
        self.max_posts = max_posts
        self.logger = create_execution_logger("feed_store", execution_id)

    def load(self) -> FeedDocument:
        """Read the feed document.

        A missing, unreadable or corrupt file yields an empty default
        document instead of an error.
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            self.logger.info("Feed document not found, starting empty", path=str(self.path))
            return FeedDocument()
        except (OSError, ValueError) as e:
            self.logger.warning(
                f"Failed to read feed document, starting empty: {e}",
                path=str(self.path),
                error=str(e),
            )
            return FeedDocument()

        if not isinstance(data, dict):
            self.logger.warning(
                "Feed document is not a JSON object, starting empty",
                path=str(self.path),
            )
            return FeedDocument()

        document = FeedDocument(
            site=self._parse_site(data.get("site")),
            posts=self._parse_posts(data.get("posts")),
            source=data,
        )
        self.logger.info(
            "Loaded feed document", path=str(self.path), posts_count=len(document.posts)
        )
        return document

    def save(self, document: FeedDocument) -> None:
        """Write the document, keeping only the newest ``max_posts`` posts.

        Raises:
            OSError: If the file cannot be written
        """
        payload = document.to_dict(max_posts=self.max_posts)
        dropped = len(document.posts) - len(payload["posts"])

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)

        self.logger.info(
            "Saved feed document",
            path=str(self.path),
            posts_count=len(payload["posts"]),
            posts_dropped=dropped,
        )

    def _parse_site(self, raw) -> SiteInfo:
        if not isinstance(raw, dict):
            return SiteInfo()

        site = SiteInfo(source=raw)
        if isinstance(raw.get("title"), str):
            site.title = raw["title"]
        if isinstance(raw.get("description"), str):
            site.description = raw["description"]
        return site

    def _parse_posts(self, raw) -> list[Post]:
        if not isinstance(raw, list):
            return []

        posts = []
        for index, entry in enumerate(raw):
            if not isinstance(entry, dict):
                self.logger.warning("Dropping malformed post entry", index=index)
                continue
            posts.append(Post.from_dict(entry))
        return posts
