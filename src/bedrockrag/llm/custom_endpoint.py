"""
Custom LLM client for OpenAI-compatible inference endpoints.

Provides a simple wrapper for local/custom inference endpoints that implement
the OpenAI chat completions API format.
"""

import logging

import requests

from bedrockrag.exceptions import GenerationError

logger = logging.getLogger(__name__)


class CustomEndpointLLM:
    """LLM client for OpenAI-compatible endpoints."""

    def __init__(
        self,
        endpoint_url: str,
        temperature: float = 0.1,
        max_tokens: int = 1024,
        timeout: int = 120,
    ):
        """
        Initialize custom endpoint client.

        Args:
            endpoint_url: Full URL to the /v1/chat/completions endpoint
            temperature: Sampling temperature (0.0 to 2.0)
            max_tokens: Default maximum tokens to generate
            timeout: Request timeout in seconds
        """
        self.endpoint_url = endpoint_url
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    def invoke(self, prompt: str, max_tokens: int | None = None) -> str:
        """
        Call the LLM with a prompt.

        Args:
            prompt: The input prompt text
            max_tokens: Override for the maximum output tokens

        Returns:
            The generated response text

        Raises:
            GenerationError: If the request fails or the response is malformed
        """
        payload = {
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": max_tokens or self.max_tokens,
        }

        try:
            response = requests.post(self.endpoint_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except requests.HTTPError as e:
            raise GenerationError(
                f"Endpoint returned HTTP {e.response.status_code}: {e.response.reason}"
            ) from e
        except requests.RequestException as e:
            raise GenerationError(f"Endpoint request failed: {e}") from e

        try:
            return result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError("Endpoint returned invalid response structure") from e

    def health_check(self, timeout: int = 30) -> tuple[bool, str]:
        """
        Perform a quick health check on the LLM endpoint.

        Sends a minimal test prompt to verify the endpoint is responsive.

        Args:
            timeout: Health check timeout in seconds (default: 30s)

        Returns:
            Tuple of (is_healthy: bool, message: str)
        """
        test_payload = {
            "messages": [{"role": "user", "content": "test"}],
            "temperature": 0.0,
            "max_tokens": 1,
        }

        try:
            logger.info(f"Performing health check on endpoint: {self.endpoint_url}")
            response = requests.post(self.endpoint_url, json=test_payload, timeout=timeout)
            response.raise_for_status()
            result = response.json()
        except requests.Timeout:
            return False, f"Endpoint timed out after {timeout}s"
        except requests.ConnectionError as e:
            return False, f"Connection failed: {e}"
        except requests.HTTPError as e:
            return False, f"HTTP {e.response.status_code}: {e.response.reason}"
        except ValueError:
            return False, "Endpoint returned a non-JSON response"

        if result.get("choices"):
            elapsed = response.elapsed.total_seconds()
            return True, f"Endpoint healthy (responded in {elapsed:.2f}s)"
        return False, "Endpoint returned invalid response structure"
