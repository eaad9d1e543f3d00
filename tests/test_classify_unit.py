"""Unit tests for the technology topic classifier."""

import json
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from obsidian_news.bedrock import BedrockTextModel
from obsidian_news.classify import TopicClassifier
from obsidian_news.config import BedrockConfig


def classifier_with_answer(answer: str, **kwargs) -> tuple[TopicClassifier, Mock]:
    model = Mock()
    model.complete.return_value = answer
    return TopicClassifier(model, **kwargs), model


class TestTopicClassifier:
    """Answer parsing and failure policy."""

    @pytest.mark.parametrize("answer", ["TECH", "tech", "  Tech\n", "TECH."])
    def test_tech_answers(self, answer):
        classifier, _ = classifier_with_answer(answer)
        assert classifier.classify("New Chip Unveiled", "A faster chip") is True

    @pytest.mark.parametrize(
        "answer", ["NOT_TECH", "not_tech", "I think this is TECH", "", "Maybe"]
    )
    def test_other_answers_reject(self, answer):
        classifier, _ = classifier_with_answer(answer)
        assert classifier.classify("Whale Song Study", "Marine biology") is False

    def test_prompt_contains_title_and_summary(self):
        classifier, model = classifier_with_answer("TECH")

        classifier.classify("New Chip Unveiled", "A faster chip")

        prompt = model.complete.call_args.args[0]
        assert "Title: New Chip Unveiled" in prompt
        assert "Summary: A faster chip" in prompt
        assert "TECH or NOT_TECH" in prompt

    def test_braces_in_title_are_safe(self):
        classifier, model = classifier_with_answer("TECH")

        classifier.classify("Rust {async} traits", "{summary}")

        assert "Title: Rust {async} traits" in model.complete.call_args.args[0]

    def test_service_error_fails_open_by_default(self):
        model = Mock()
        model.complete.side_effect = ClientError(
            {"Error": {"Code": "ServiceUnavailableException", "Message": "down"}},
            "InvokeModel",
        )

        assert TopicClassifier(model).classify("Anything", "") is True

    def test_fail_open_can_be_disabled(self):
        model = Mock()
        model.complete.side_effect = ClientError(
            {"Error": {"Code": "ThrottlingException", "Message": "slow down"}},
            "InvokeModel",
        )

        assert TopicClassifier(model, fail_open=False).classify("Anything", "") is False

    def test_model_is_called_with_allow_empty(self):
        classifier, model = classifier_with_answer("TECH")

        classifier.classify("New Chip Unveiled", "A faster chip")

        assert model.complete.call_args.kwargs == {"allow_empty": True}


def bedrock_classifier(body: dict, **kwargs) -> TopicClassifier:
    client = Mock()
    client.invoke_model.return_value = {"body": Mock()}
    client.invoke_model.return_value["body"].read.return_value = json.dumps(body)
    model = BedrockTextModel(client, BedrockConfig(model_id="amazon.nova-micro-v1:0"))
    return TopicClassifier(model, **kwargs)


class TestTopicClassifierWithBedrock:
    """Responses without an answer are rejections, not service errors."""

    @pytest.mark.parametrize(
        "body",
        [
            {"output": {"message": {"content": [{"text": ""}]}}},
            {"output": {"message": {"content": [{"text": "   "}]}}},
            {"output": {"message": {"content": []}}},
            {"unexpected": True},
            ["not", "an", "object"],
        ],
    )
    def test_empty_answer_rejects_even_when_failing_open(self, body):
        classifier = bedrock_classifier(body, fail_open=True)

        assert classifier.classify("Whale Song Study", "Marine biology") is False

    def test_tech_answer_accepts(self):
        classifier = bedrock_classifier(
            {"output": {"message": {"content": [{"text": "TECH"}]}}}
        )

        assert classifier.classify("New Chip Unveiled", "A faster chip") is True
