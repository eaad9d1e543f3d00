"""Article drafting backed by a Bedrock model."""

import json
import re

from .bedrock import BedrockTextModel
from .logging_config import create_execution_logger
from .models import Article

DRAFT_PROMPT = """Write a 600-850 word technology news article for a professional audience based on the item below. Focus on verified facts, product impact, developer relevance, and industry context. Exclude general science angles. Include a short, clear title and a 1-2 sentence excerpt.
Return JSON only, a single object with the keys: title, excerpt, html. Do not wrap it in Markdown.
The html must use only <p>, <h2>, <ul> and <li> elements. Do not include external scripts, images, stylesheets or any other external resources.
Use plain ASCII characters only: straight quotes, hyphens instead of dashes, no emoji or symbols.

Source title: {title}
Source summary: {summary}
Source link: {link}"""

REQUIRED_FIELDS = ("title", "excerpt", "html")

_CODE_FENCE = re.compile(r"^```(?:json)?\s*\n(.*)\n```$", re.DOTALL)


class DraftError(ValueError):
    """Raised when the model output is not a valid article."""


class ArticleDrafter:
    """Turns a candidate into a full article."""

    def __init__(self, model: BedrockTextModel, execution_id: str | None = None):
        self.model = model
        self.logger = create_execution_logger("drafter", execution_id)

    def build_prompt(self, title: str, summary: str, link: str) -> str:
        return DRAFT_PROMPT.format(title=title, summary=summary, link=link)

    def draft(self, title: str, summary: str, link: str) -> Article:
        """Draft an article for a candidate.

        Raises:
            DraftError: If the response is not a JSON object with the fields
            botocore.exceptions.ClientError: If the Bedrock call fails
        """
        self.logger.info("Drafting article", item_title=title, link=link)
        raw = self.model.complete(self.build_prompt(title, summary, link))
        article = self.parse_response(raw)
        self.logger.info(
            "Drafted article",
            item_title=article.title,
            html_length=len(article.html),
        )
        return article

    def parse_response(self, raw: str) -> Article:
        """Parse the model output strictly into an Article."""
        text = raw.strip()
        match = _CODE_FENCE.match(text)
        if match:
            text = match.group(1).strip()

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DraftError(f"Draft response is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise DraftError("Draft response is not a JSON object")

        missing = [
            name
            for name in REQUIRED_FIELDS
            if not isinstance(data.get(name), str) or not data[name].strip()
        ]
        if missing:
            raise DraftError(f"Draft response missing fields: {', '.join(missing)}")

        return Article(
            title=data["title"].strip(),
            excerpt=data["excerpt"].strip(),
            html=data["html"].strip(),
        )
