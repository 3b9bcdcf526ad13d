"""LLM clients for bedrockrag."""

from bedrockrag.llm.bedrock import BedrockLLM
from bedrockrag.llm.custom_endpoint import CustomEndpointLLM
from bedrockrag.llm.factory import LLMProtocol, create_llm

__all__ = ["BedrockLLM", "CustomEndpointLLM", "LLMProtocol", "create_llm"]
