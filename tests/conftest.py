"""
Pytest configuration and shared fixtures.

Provides common fixtures for:
    - Configuration with test values
    - Mock Bedrock runtime client
    - Sample document chunks with known embeddings
    - Deterministic fake embedder and LLM
"""

import io
import json
from unittest.mock import MagicMock, patch

import numpy as np
import pytest


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def mock_settings(tmp_path):
    """Provide test settings without requiring .env file."""
    with patch.dict(
        "os.environ",
        {
            "AWS_REGION": "eu-west-1",
            "SOURCE_URL": "https://example.com/docs.html",
            "CHUNK_SIZE": "200",
            "CHUNK_OVERLAP": "20",
            "VECTOR_STORE": "faiss",
            "FAISS_INDEX_PATH": str(tmp_path / "index" / "faiss.index"),
            "EMBEDDING_DIMENSION": "3",
        },
    ):
        from bedrockrag.config import Settings
        yield Settings(_env_file=None)


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def sample_chunks():
    """Three chunks of a Bedrock Studio page."""
    from bedrockrag.retrieval.chunker import Chunk

    source = "https://docs.aws.amazon.com/bedrock/latest/userguide/br-studio.html"
    return [
        Chunk(
            content="Amazon Bedrock Studio is a web app for building generative AI applications.",
            metadata={"source": source, "chunk_index": 0, "start_index": 0},
        ),
        Chunk(
            content="Workspaces group members and projects in Bedrock Studio.",
            metadata={"source": source, "chunk_index": 1, "start_index": 80},
        ),
        Chunk(
            content="Knowledge bases connect models to your own data sources.",
            metadata={"source": source, "chunk_index": 2, "start_index": 140},
        ),
    ]


@pytest.fixture
def sample_embeddings():
    """Orthogonal embeddings, one per sample chunk."""
    return np.array(
        [
            [1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.0, 0.0, 1.0],
        ],
        dtype=np.float32,
    )


@pytest.fixture
def faiss_store(sample_chunks, sample_embeddings):
    """FAISS store holding the sample chunks."""
    from bedrockrag.retrieval.store import FAISSVectorStore

    store = FAISSVectorStore(dimension=3)
    store.add(list(zip(sample_chunks, sample_embeddings)))
    return store


# =============================================================================
# Fake Collaborators
# =============================================================================

class FakeEmbedder:
    """Embedder returning preset vectors keyed by text (zeros otherwise)."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, dimension: int = 3):
        self.vectors = vectors or {}
        self.dimension = dimension
        self.calls: list[list[str]] = []

    def embed_texts(self, texts):
        self.calls.append(list(texts))
        return np.array(
            [self.vectors.get(text, [0.0] * self.dimension) for text in texts],
            dtype=np.float32,
        ).reshape(len(texts), self.dimension)

    def embed_query(self, query):
        return self.embed_texts([query])[0]


class FakeLLM:
    """LLM that records prompts and returns a canned answer."""

    def __init__(self, response: str = "Bedrock Studio is a web app."):
        self.response = response
        self.prompts: list[str] = []
        self.max_tokens: list[int | None] = []

    def invoke(self, prompt, max_tokens=None):
        self.prompts.append(prompt)
        self.max_tokens.append(max_tokens)
        return self.response


@pytest.fixture
def fake_embedder():
    """Factory fixture for FakeEmbedder."""
    return FakeEmbedder


@pytest.fixture
def fake_llm():
    """Provide a FakeLLM with the default answer."""
    return FakeLLM()


# =============================================================================
# Mock AWS Fixtures
# =============================================================================

def bedrock_body(payload: dict) -> dict:
    """Build an ``invoke_model`` response whose body streams the payload."""
    return {"body": io.BytesIO(json.dumps(payload).encode("utf-8"))}


@pytest.fixture
def bedrock_response():
    """Provide the ``bedrock_body`` helper to tests."""
    return bedrock_body


@pytest.fixture
def mock_bedrock_client():
    """MagicMock standing in for a boto3 bedrock-runtime client."""
    return MagicMock(name="bedrock-runtime")
