"""Configuration management for the Obsidian News generator."""

import json
import os
from dataclasses import dataclass
from pathlib import Path


class MissingCredentialError(RuntimeError):
    """Raised when the language-model credential is not in the environment."""


@dataclass
class BedrockConfig:
    """Configuration for one Amazon Bedrock model."""

    model_id: str = "amazon.nova-micro-v1:0"
    region: str = "us-east-1"
    max_tokens: int = 1000
    temperature: float = 0.3


@dataclass
class StoreConfig:
    """Configuration for the feed document and derived files."""

    feed_file: str = "feed.json"
    sitemap_file: str = "sitemap.xml"
    site_url: str = "https://obsidian-news.com"
    max_posts: int = 500


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


class Config:
    """Main configuration manager."""

    # Default feeds file path
    FEEDS_FILE = "feeds.json"

    DEFAULT_FEEDS = [
        "https://hnrss.org/frontpage",
        "https://www.techmeme.com/feed.xml",
        "https://rss.nytimes.com/services/xml/rss/nyt/Technology.xml",
    ]

    # Bedrock API key, picked up by boto3 from the environment
    DEFAULT_CREDENTIAL_ENV_VAR = "AWS_BEARER_TOKEN_BEDROCK"

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.aws_region = os.getenv(
            "CURRENT_AWS_REGION", os.getenv("AWS_DEFAULT_REGION", "us-east-1")
        )
        self.classifier_model_id = os.getenv(
            "CLASSIFIER_MODEL_ID", "amazon.nova-micro-v1:0"
        )
        self.drafter_model_id = os.getenv("DRAFTER_MODEL_ID", "amazon.nova-pro-v1:0")
        self.classifier_fail_open = _env_flag("CLASSIFIER_FAIL_OPEN", True)
        self.credential_env_var = os.getenv(
            "CREDENTIAL_ENV_VAR", self.DEFAULT_CREDENTIAL_ENV_VAR
        )
        self.feed_file = os.getenv("FEED_FILE", "feed.json")
        self.sitemap_file = os.getenv("SITEMAP_FILE", "sitemap.xml")
        self.site_url = os.getenv("SITE_URL", "https://obsidian-news.com").rstrip("/")
        self.max_posts = _env_int("MAX_POSTS", 500)
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

    def require_credential(self) -> str:
        """Return the language-model credential or raise if it is missing.

        Raises:
            MissingCredentialError: If the variable is unset or blank
        """
        value = os.getenv(self.credential_env_var, "")
        if not value.strip():
            raise MissingCredentialError(
                f"Missing required credential: {self.credential_env_var}"
            )
        return value

    def get_feed_urls(self) -> list[str]:
        """Get RSS feed URLs from feeds.json, falling back to the defaults."""
        feeds_file = Path(self.FEEDS_FILE)
        if not feeds_file.exists():
            return list(self.DEFAULT_FEEDS)

        try:
            with open(feeds_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in feeds file: {e}")
        except OSError as e:
            raise ValueError(f"Error reading feeds file: {e}")

        feeds = data.get("feeds", []) if isinstance(data, dict) else []
        enabled_urls = [
            feed["url"]
            for feed in feeds
            if isinstance(feed, dict) and feed.get("enabled", True) and "url" in feed
        ]

        if not enabled_urls:
            raise ValueError("No enabled feeds found in feeds.json")

        return enabled_urls

    def get_classifier_config(self) -> BedrockConfig:
        """Get Bedrock configuration for the topic classifier."""
        # One short token is all the gate needs
        return BedrockConfig(
            model_id=self.classifier_model_id,
            region=self.aws_region,
            max_tokens=10,
            temperature=0.0,
        )

    def get_drafter_config(self) -> BedrockConfig:
        """Get Bedrock configuration for the article drafter."""
        return BedrockConfig(
            model_id=self.drafter_model_id,
            region=self.aws_region,
            max_tokens=3000,
            temperature=0.3,
        )

    def get_store_config(self) -> StoreConfig:
        """Get feed document configuration."""
        return StoreConfig(
            feed_file=self.feed_file,
            sitemap_file=self.sitemap_file,
            site_url=self.site_url,
            max_posts=self.max_posts,
        )
