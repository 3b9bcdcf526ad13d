"""
Embedding generation via Amazon Bedrock or the HuggingFace Inference API.

Both embedders return L2-normalized float32 vectors so that inner product
equals cosine similarity downstream.
"""

import json
import logging
from typing import Any, Optional, Protocol

import httpx
import numpy as np
from botocore.exceptions import BotoCoreError, ClientError
from numpy.typing import NDArray

from bedrockrag.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    """Protocol that all embedders implement."""

    dimension: int

    def embed_texts(self, texts: list[str]) -> NDArray[np.float32]:
        """Embed a batch of texts into an array of shape (len(texts), dimension)."""
        ...

    def embed_query(self, query: str) -> NDArray[np.float32]:
        """Embed a single query into an array of shape (dimension,)."""
        ...


def normalize_embeddings(embeddings: NDArray[np.float32]) -> NDArray[np.float32]:
    """
    Normalize embeddings to unit length for cosine similarity.

    Args:
        embeddings: Array of shape (n, dimension)

    Returns:
        Normalized embeddings of same shape
    """
    norms = np.linalg.norm(embeddings, axis=1, keepdims=True)
    # Avoid division by zero
    norms = np.where(norms == 0, 1, norms)
    return (embeddings / norms).astype(np.float32)


class BedrockEmbedder:
    """
    Generate embeddings with an Amazon Titan embedding model on Bedrock.

    Titan takes one input text per request, so texts are embedded one call
    at a time.

    Example:
        >>> embedder = BedrockEmbedder(client=create_bedrock_client("us-east-1"))
        >>> vectors = embedder.embed_texts(["What is Bedrock Studio?"])
        >>> vectors.shape
        (1, 1536)
    """

    def __init__(
        self,
        client: Any,
        model: str = "amazon.titan-embed-text-v1",
        dimension: int = 1536,
    ) -> None:
        """
        Initialize the embedder.

        Args:
            client: boto3 ``bedrock-runtime`` client
            model: Bedrock embedding model ID
            dimension: Expected embedding dimension
        """
        self.client = client
        self.model = model
        self.dimension = dimension

    def embed_texts(self, texts: list[str]) -> NDArray[np.float32]:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: List of texts to embed

        Returns:
            Array of shape (len(texts), embedding_dimension)

        Raises:
            EmbeddingError: If any Bedrock call fails
        """
        if not texts:
            return np.empty((0, self.dimension), dtype=np.float32)

        vectors = [self._embed_one(text) for text in texts]
        return normalize_embeddings(np.array(vectors, dtype=np.float32))

    def embed_query(self, query: str) -> NDArray[np.float32]:
        """Generate embedding for a single query."""
        return self.embed_texts([query])[0]

    def _embed_one(self, text: str) -> list[float]:
        try:
            response = self.client.invoke_model(
                modelId=self.model,
                body=json.dumps({"inputText": text}),
                accept="application/json",
                contentType="application/json",
            )
            payload = json.loads(response["body"].read())
        except (ClientError, BotoCoreError) as e:
            raise EmbeddingError(f"Bedrock embedding call failed ({self.model}): {e}") from e

        embedding = payload.get("embedding")
        if not embedding:
            raise EmbeddingError(f"Bedrock returned no embedding ({self.model})")
        return embedding


class HuggingFaceEmbedder:
    """
    Generate embeddings using HuggingFace Inference API.

    Example:
        >>> embedder = HuggingFaceEmbedder(api_key="hf_...")
        >>> vectors = embedder.embed_texts(["What is Bedrock Studio?"])
        >>> vectors.shape
        (1, 384)
    """

    base_url = "https://api-inference.huggingface.co/pipeline/feature-extraction"

    def __init__(
        self,
        model: str = "sentence-transformers/all-MiniLM-L6-v2",
        api_key: Optional[str] = None,
        dimension: int = 384,
        batch_size: int = 32,
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize the embedder.

        Args:
            model: HuggingFace model ID
            api_key: HuggingFace API key
            dimension: Expected embedding dimension
            batch_size: Number of texts per API call
            timeout: Request timeout in seconds
        """
        self.model = model
        self.api_key = api_key
        self.dimension = dimension
        self.batch_size = batch_size
        self.timeout = timeout

    def embed_texts(self, texts: list[str]) -> NDArray[np.float32]:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: List of texts to embed

        Returns:
            Array of shape (len(texts), embedding_dimension)

        Raises:
            EmbeddingError: If the API call fails or returns malformed data
        """
        if not texts:
            return np.empty((0, self.dimension), dtype=np.float32)

        all_embeddings: list[NDArray[np.float32]] = []

        with httpx.Client(timeout=self.timeout) as client:
            for i in range(0, len(texts), self.batch_size):
                batch = texts[i : i + self.batch_size]
                all_embeddings.append(self._embed_batch(client, batch))

        return np.vstack(all_embeddings)

    def embed_query(self, query: str) -> NDArray[np.float32]:
        """Generate embedding for a single query."""
        return self.embed_texts([query])[0]

    def _embed_batch(self, client: httpx.Client, texts: list[str]) -> NDArray[np.float32]:
        url = f"{self.base_url}/{self.model}"
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            response = client.post(url, json={"inputs": texts}, headers=headers)
            response.raise_for_status()
            embeddings = np.array(response.json(), dtype=np.float32)
        except httpx.HTTPStatusError as e:
            raise EmbeddingError(
                f"HuggingFace embedding API returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise EmbeddingError(f"HuggingFace embedding request failed: {e}") from e
        except ValueError as e:
            raise EmbeddingError(f"Malformed embedding response: {e}") from e

        if embeddings.ndim != 2 or len(embeddings) != len(texts):
            raise EmbeddingError(
                f"Expected {len(texts)} embeddings, got array of shape {embeddings.shape}"
            )

        return normalize_embeddings(embeddings)
