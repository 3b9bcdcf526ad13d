"""
LLM client for text models hosted on Amazon Bedrock.

Request and response bodies differ per model family; the family is picked
from the model ID prefix. Only the first returned candidate is used.
"""

import json
import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from bedrockrag.exceptions import ConfigError, GenerationError

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "bedrock-2023-05-31"


def _titan_request(prompt: str, max_tokens: int, temperature: float) -> dict[str, Any]:
    return {
        "inputText": prompt,
        "textGenerationConfig": {
            "maxTokenCount": max_tokens,
            "temperature": temperature,
        },
    }


def _titan_response(payload: dict[str, Any]) -> str:
    return payload["results"][0]["outputText"]


def _anthropic_request(prompt: str, max_tokens: int, temperature: float) -> dict[str, Any]:
    return {
        "anthropic_version": ANTHROPIC_VERSION,
        "max_tokens": max_tokens,
        "temperature": temperature,
        "messages": [
            {"role": "user", "content": [{"type": "text", "text": prompt}]},
        ],
    }


def _anthropic_response(payload: dict[str, Any]) -> str:
    return "".join(
        part["text"] for part in payload["content"] if part.get("type") == "text"
    )


MODEL_FAMILIES = {
    "amazon.titan-text": (_titan_request, _titan_response),
    "anthropic.": (_anthropic_request, _anthropic_response),
}


class BedrockLLM:
    """LLM client for Bedrock ``invoke_model``."""

    def __init__(
        self,
        client: Any,
        model_id: str = "amazon.titan-text-premier-v1:0",
        temperature: float = 0.1,
        max_tokens: int = 3072,
    ) -> None:
        """
        Initialize the Bedrock client wrapper.

        Args:
            client: boto3 ``bedrock-runtime`` client
            model_id: Bedrock model ID (Titan text or Anthropic Claude)
            temperature: Sampling temperature
            max_tokens: Default maximum tokens to generate

        Raises:
            ConfigError: If the model family is not supported
        """
        for prefix, (build, parse) in MODEL_FAMILIES.items():
            if model_id.startswith(prefix):
                self._build_request = build
                self._parse_response = parse
                break
        else:
            raise ConfigError(f"Unsupported Bedrock model: {model_id}")

        self.client = client
        self.model_id = model_id
        self.temperature = temperature
        self.max_tokens = max_tokens

    def invoke(self, prompt: str, max_tokens: int | None = None) -> str:
        """
        Call the model with a prompt.

        Args:
            prompt: The input prompt text
            max_tokens: Override for the maximum output tokens

        Returns:
            The generated text of the first candidate

        Raises:
            GenerationError: If the call fails or the response has no candidate
        """
        body = self._build_request(prompt, max_tokens or self.max_tokens, self.temperature)

        try:
            response = self.client.invoke_model(
                modelId=self.model_id,
                body=json.dumps(body),
                accept="application/json",
                contentType="application/json",
            )
            payload = json.loads(response["body"].read())
        except (ClientError, BotoCoreError) as e:
            raise GenerationError(f"Bedrock call failed ({self.model_id}): {e}") from e

        try:
            text = self._parse_response(payload)
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError(f"Bedrock returned no usable candidate ({self.model_id})") from e

        logger.debug(f"Generated {len(text)} characters with {self.model_id}")
        return text
