"""
LLM factory for creating LLM instances based on configuration.

Provides a unified interface for creating LLM clients regardless of backend
(Bedrock or a custom OpenAI-compatible endpoint).
"""

from typing import Any, Protocol

from bedrockrag.config import Settings


class LLMProtocol(Protocol):
    """Protocol that all LLM clients must implement."""

    def invoke(self, prompt: str, max_tokens: int | None = None) -> str:
        """Call the LLM with a prompt and return the first candidate's text."""
        ...


def create_llm(
    settings: Settings,
    bedrock_client: Any = None,
    temperature: float | None = None,
) -> LLMProtocol:
    """
    Create an LLM client based on configuration settings.

    Args:
        settings: Application settings
        bedrock_client: Shared ``bedrock-runtime`` client (llm_provider=bedrock)
        temperature: Optional temperature override. If None, uses settings.llm_temperature

    Returns:
        LLM client that implements the LLMProtocol

    Raises:
        ValueError: If the Bedrock provider is selected without a client
        ConfigError: If the configured Bedrock model is unsupported
    """
    temp = temperature if temperature is not None else settings.llm_temperature

    if settings.llm_provider == "custom":
        from bedrockrag.llm.custom_endpoint import CustomEndpointLLM

        return CustomEndpointLLM(
            endpoint_url=settings.custom_endpoint_url,
            temperature=temp,
            max_tokens=settings.llm_max_tokens,
        )

    if bedrock_client is None:
        raise ValueError("A Bedrock client is required for Bedrock generation")

    from bedrockrag.llm.bedrock import BedrockLLM

    return BedrockLLM(
        client=bedrock_client,
        model_id=settings.llm_model_id,
        temperature=temp,
        max_tokens=settings.llm_max_tokens,
    )
