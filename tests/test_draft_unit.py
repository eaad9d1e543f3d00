"""Unit tests for the article drafter."""

import json
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from obsidian_news.draft import ArticleDrafter, DraftError
from obsidian_news.models import Article

VALID_DRAFT = {
    "title": "New Chip Unveiled",
    "excerpt": "A faster chip ships this fall.",
    "html": "<p>Details.</p>",
}


def drafter_with_response(text: str) -> tuple[ArticleDrafter, Mock]:
    model = Mock()
    model.complete.return_value = text
    return ArticleDrafter(model), model


class TestArticleDrafter:
    """Prompting and strict response parsing."""

    def test_valid_response(self):
        drafter, _ = drafter_with_response(json.dumps(VALID_DRAFT))

        article = drafter.draft("Chip", "Summary", "https://example.com/chip")

        assert article == Article(**VALID_DRAFT)

    def test_prompt_carries_source_and_rules(self):
        drafter, model = drafter_with_response(json.dumps(VALID_DRAFT))

        drafter.draft("Chip", "Summary text", "https://example.com/chip")

        prompt = model.complete.call_args.args[0]
        assert "Source title: Chip" in prompt
        assert "Source summary: Summary text" in prompt
        assert "Source link: https://example.com/chip" in prompt
        assert "600-850 word" in prompt
        assert "title, excerpt, html" in prompt
        assert all(ord(char) < 128 for char in prompt)

    def test_code_fenced_json_is_accepted(self):
        drafter, _ = drafter_with_response(
            "```json\n" + json.dumps(VALID_DRAFT) + "\n```"
        )

        assert drafter.draft("Chip", "", "").title == "New Chip Unveiled"

    def test_non_json_raises(self):
        drafter, _ = drafter_with_response("Here is your article: New Chip...")

        with pytest.raises(DraftError):
            drafter.draft("Chip", "", "")

    def test_json_array_raises(self):
        drafter, _ = drafter_with_response(json.dumps([VALID_DRAFT]))

        with pytest.raises(DraftError):
            drafter.draft("Chip", "", "")

    @pytest.mark.parametrize("field", ["title", "excerpt", "html"])
    def test_missing_field_raises(self, field):
        data = {key: value for key, value in VALID_DRAFT.items() if key != field}
        drafter, _ = drafter_with_response(json.dumps(data))

        with pytest.raises(DraftError, match=field):
            drafter.draft("Chip", "", "")

    def test_non_string_field_raises(self):
        drafter, _ = drafter_with_response(json.dumps({**VALID_DRAFT, "html": ["<p>"]}))

        with pytest.raises(DraftError):
            drafter.draft("Chip", "", "")

    def test_transport_error_propagates(self):
        model = Mock()
        model.complete.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "no"}},
            "InvokeModel",
        )

        with pytest.raises(ClientError):
            ArticleDrafter(model).draft("Chip", "", "")
