"""Amazon Bedrock text generation shared by the classifier and drafter."""

import json
import time

import boto3
from botocore.config import Config as BotoConfig

from .config import BedrockConfig
from .logging_config import create_execution_logger


class BedrockResponseError(ValueError):
    """Raised when a Bedrock response carries no usable text."""


def create_bedrock_client(region: str):
    """Create a bedrock-runtime client with automatic retries turned off."""
    return boto3.client(
        "bedrock-runtime",
        region_name=region,
        config=BotoConfig(retries={"total_max_attempts": 1}),
    )


class BedrockTextModel:
    """Sends one prompt to a Bedrock model and returns the generated text."""

    def __init__(self, client, config: BedrockConfig, execution_id: str | None = None):
        """Initialize the model wrapper.

        Args:
            client: A boto3 bedrock-runtime client
            config: Model id and inference settings
            execution_id: Execution ID for logging context
        """
        self.client = client
        self.config = config
        self.logger = create_execution_logger("bedrock", execution_id)

    @property
    def is_llama(self) -> bool:
        return "llama" in self.config.model_id.lower()

    def _format_llama_prompt(self, prompt: str) -> str:
        """Format prompt with Llama 3 chat template tags."""
        return (
            "<|begin_of_text|><|start_header_id|>user<|end_header_id|>\n\n"
            f"{prompt}<|eot_id|><|start_header_id|>assistant<|end_header_id|>\n\n"
        )

    def _build_request(self, prompt: str) -> dict:
        # Llama: legacy prompt/max_gen_len format with chat template tags
        # Nova / Mistral: messages/inferenceConfig format
        if self.is_llama:
            return {
                "prompt": self._format_llama_prompt(prompt),
                "max_gen_len": self.config.max_tokens,
                "temperature": self.config.temperature,
            }
        return {
            "messages": [{"role": "user", "content": [{"text": prompt}]}],
            "inferenceConfig": {
                "maxTokens": self.config.max_tokens,
                "temperature": self.config.temperature,
            },
        }

    def _extract_text(self, response_body) -> str | None:
        if not isinstance(response_body, dict):
            return None
        if self.is_llama:
            return response_body.get("generation")

        message = response_body.get("output", {}).get("message", {})
        content = message.get("content") or []
        if content:
            return content[0].get("text")
        return None

    def complete(self, prompt: str, allow_empty: bool = False) -> str:
        """Invoke the model once.

        Args:
            prompt: Full prompt text
            allow_empty: Return "" instead of raising when the response has no text

        Returns:
            The generated text, stripped

        Raises:
            botocore.exceptions.ClientError: If the Bedrock call fails
            BedrockResponseError: If the response has no text and
                ``allow_empty`` is false
        """
        self.logger.info(
            "Calling Bedrock API",
            model_id=self.config.model_id,
            prompt_length=len(prompt),
        )

        start_time = time.time()
        response = self.client.invoke_model(
            modelId=self.config.model_id,
            body=json.dumps(self._build_request(prompt)),
            contentType="application/json",
            accept="application/json",
        )
        response_time_ms = int((time.time() - start_time) * 1000)

        response_body = json.loads(response["body"].read())
        text = self._extract_text(response_body)

        if not isinstance(text, str) or not text.strip():
            if allow_empty:
                self.logger.warning(
                    "Bedrock response has no text",
                    model_id=self.config.model_id,
                    response_type=type(response_body).__name__,
                )
                return ""
            self.logger.error(
                "Bedrock response missing text",
                model_id=self.config.model_id,
                response_type=type(response_body).__name__,
            )
            raise BedrockResponseError(
                f"Empty or invalid response from model {self.config.model_id}"
            )

        self.logger.info(
            "Bedrock response received",
            model_id=self.config.model_id,
            response_length=len(text),
            response_time_ms=response_time_ms,
        )
        return text.strip()
