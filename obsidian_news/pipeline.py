"""Candidate selection and publishing pipeline."""

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from .classify import TopicClassifier
from .draft import ArticleDrafter
from .logging_config import create_execution_logger
from .models import Article, Candidate, FeedDocument, Post
from .rss import FeedProcessor
from .store import FeedStore
from .text import slugify, to_ascii


class RunStatus(str, Enum):
    """Outcome of one pipeline run."""

    PUBLISHED = "published"
    NO_CANDIDATES = "no_candidates"
    NO_TECH_CANDIDATE = "no_tech_candidate"
    DRAFT_FAILED = "draft_failed"
    DUPLICATE_SLUG = "duplicate_slug"
    PERSIST_FAILED = "persist_failed"


@dataclass
class PipelineResult:
    status: RunStatus
    post: Post | None = None
    metrics: dict[str, Any] = field(default_factory=dict)

    @property
    def published(self) -> bool:
        return self.status is RunStatus.PUBLISHED


def utc_now() -> datetime:
    return datetime.now(UTC)


def new_post_id() -> str:
    return str(uuid.uuid4())


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with milliseconds and a Z suffix."""
    moment = moment.astimezone(UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Pipeline:
    """Publishes at most one new tech article per run.

    Steps: load the feed document, aggregate candidates, pick the first
    new candidate the classifier accepts, draft it, and prepend the
    result to the document. Every step failure ends the run quietly.
    """

    def __init__(
        self,
        store: FeedStore,
        feed_processor: FeedProcessor,
        classifier: TopicClassifier,
        drafter: ArticleDrafter,
        feed_urls: list[str],
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_post_id,
        execution_id: str | None = None,
    ):
        self.store = store
        self.feed_processor = feed_processor
        self.classifier = classifier
        self.drafter = drafter
        self.feed_urls = feed_urls
        self.clock = clock
        self.id_factory = id_factory
        self.logger = create_execution_logger("pipeline", execution_id)

    def run(self) -> PipelineResult:
        """Run the pipeline once."""
        self.logger.log_execution_start(feed_count=len(self.feed_urls))
        metrics = {
            "feeds_processed": 0,
            "candidates_found": 0,
            "candidates_skipped_duplicate": 0,
            "candidates_classified": 0,
            "posts_published": 0,
            "errors": [],
        }

        result = self._run(metrics)
        result.metrics = metrics

        self.logger.log_metrics(metrics)
        self.logger.log_execution_end(
            success=not metrics["errors"], status=result.status.value
        )
        return result

    def _run(self, metrics: dict[str, Any]) -> PipelineResult:
        # LOAD
        document = self.store.load()
        existing_titles = document.titles()

        # AGGREGATE
        candidates = self.feed_processor.fetch_candidates(self.feed_urls)
        metrics["feeds_processed"] = getattr(self.feed_processor, "feeds_processed", 0)
        metrics["candidates_found"] = len(candidates)
        if not candidates:
            self.logger.info("No candidates fetched", status=RunStatus.NO_CANDIDATES.value)
            return PipelineResult(RunStatus.NO_CANDIDATES)

        # SELECT
        picked = self.select_candidate(candidates, existing_titles, metrics)
        if picked is None:
            self.logger.info(
                "No new tech candidate found", status=RunStatus.NO_TECH_CANDIDATE.value
            )
            return PipelineResult(RunStatus.NO_TECH_CANDIDATE)

        # DRAFT
        try:
            article = self.drafter.draft(picked.title, picked.summary, picked.link)
        except Exception as e:
            error_msg = f"Failed to draft article for '{picked.title}': {e}"
            self.logger.error(
                error_msg,
                item_title=picked.title,
                status=RunStatus.DRAFT_FAILED.value,
                error=str(e),
            )
            metrics["errors"].append(error_msg)
            return PipelineResult(RunStatus.DRAFT_FAILED)

        # PUBLISH
        return self.publish(document, article, metrics)

    def select_candidate(
        self,
        candidates: list[Candidate],
        existing_titles: set[str],
        metrics: dict[str, Any],
    ) -> Candidate | None:
        """Return the first unseen candidate the classifier accepts."""
        for candidate in candidates:
            if not candidate.title:
                continue
            if candidate.title in existing_titles:
                metrics["candidates_skipped_duplicate"] += 1
                self.logger.log_candidate(candidate.title, "skipped_duplicate")
                continue

            metrics["candidates_classified"] += 1
            if self.classifier.classify(candidate.title, candidate.summary):
                self.logger.log_candidate(candidate.title, "selected")
                return candidate
            self.logger.log_candidate(candidate.title, "rejected_not_tech")

        return None

    def publish(
        self, document: FeedDocument, article: Article, metrics: dict[str, Any]
    ) -> PipelineResult:
        """Normalize the article and prepend it unless its slug is taken."""
        title = to_ascii(article.title)
        slug = slugify(title)

        if not slug or slug in document.slugs():
            self.logger.info(
                "Duplicate slug, skipping",
                slug=slug,
                item_title=title,
                status=RunStatus.DUPLICATE_SLUG.value,
            )
            return PipelineResult(RunStatus.DUPLICATE_SLUG)

        post = Post(
            id=self.id_factory(),
            slug=slug,
            title=title,
            date=format_timestamp(self.clock()),
            excerpt=to_ascii(article.excerpt),
            html=to_ascii(article.html),
        )
        document.posts.insert(0, post)

        try:
            self.store.save(document)
        except Exception as e:
            document.posts.pop(0)
            error_msg = f"Failed to save feed document: {e}"
            self.logger.error(
                error_msg, slug=slug, status=RunStatus.PERSIST_FAILED.value, error=str(e)
            )
            metrics["errors"].append(error_msg)
            return PipelineResult(RunStatus.PERSIST_FAILED)

        metrics["posts_published"] += 1
        self.logger.info(
            f"Wrote: {post.title}", slug=slug, status=RunStatus.PUBLISHED.value
        )
        return PipelineResult(RunStatus.PUBLISHED, post=post)
