"""
Construction of the retrieval components from settings.

Each factory builds a fresh component from an explicit Settings object;
the CLI builds them once at startup and passes them into the chains.

Usage:
    settings = get_settings()
    client = create_bedrock_client(settings.aws_region)
    embedder = create_embedder(settings, client)
    store = create_vector_store(settings, dimension=embedder.dimension)
"""

import logging
from typing import Any

from bedrockrag.config import Settings
from bedrockrag.exceptions import ConfigError
from bedrockrag.retrieval.embeddings import BedrockEmbedder, Embedder, HuggingFaceEmbedder
from bedrockrag.retrieval.store import FAISSVectorStore, VectorStore

logger = logging.getLogger(__name__)


def create_embedder(settings: Settings, bedrock_client: Any = None) -> Embedder:
    """
    Create the configured embedder.

    Args:
        settings: Application settings
        bedrock_client: Shared ``bedrock-runtime`` client (embedding_provider=bedrock)

    Returns:
        Embedder ready for use

    Raises:
        ValueError: If the Bedrock provider is selected without a client
    """
    if settings.embedding_provider == "huggingface":
        logger.info(f"Using HuggingFace embeddings: {settings.embedding_model}")
        return HuggingFaceEmbedder(
            model=settings.embedding_model,
            api_key=settings.hf_api_key_value,
            dimension=settings.embedding_dimension,
        )

    if bedrock_client is None:
        raise ValueError("A Bedrock client is required for Bedrock embeddings")

    logger.info(f"Using Bedrock embeddings: {settings.embedding_model}")
    return BedrockEmbedder(
        client=bedrock_client,
        model=settings.embedding_model,
        dimension=settings.embedding_dimension,
    )


def create_vector_store(settings: Settings, dimension: int | None = None) -> VectorStore:
    """
    Create the configured vector store.

    The FAISS store is loaded from ``faiss_index_path`` when saved files
    exist there; otherwise it starts empty.

    Raises:
        ConfigError: If the saved FAISS files are incomplete or unreadable
        DimensionMismatch: If the saved index has another dimension
        StoreConnectionError: If the pgvector database is unreachable
    """
    dimension = dimension or settings.embedding_dimension

    if settings.vector_store == "faiss":
        store = FAISSVectorStore(dimension=dimension)
        if settings.faiss_index_path.with_suffix(".index").exists():
            logger.info(f"Loading FAISS index from {settings.faiss_index_path}")
            try:
                store.load(settings.faiss_index_path)
            except (OSError, ValueError, RuntimeError, KeyError) as e:
                # faiss reports unreadable index files as RuntimeError
                raise ConfigError(
                    f"Saved FAISS index at {settings.faiss_index_path} is unusable: {e}"
                ) from e
        return store

    from bedrockrag.retrieval.pgvector_store import PGVectorStore

    return PGVectorStore(
        connection_url=settings.pg_connection_url,
        collection=settings.pg_collection,
        dimension=dimension,
        pre_delete_collection=settings.pg_pre_delete_collection,
    )
