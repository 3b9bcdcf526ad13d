"""
Retriever: embeds a question and looks up the nearest stored chunks.

Embedding and store errors propagate unchanged; nothing is retried here.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bedrockrag.retrieval.embeddings import Embedder
    from bedrockrag.retrieval.store import RetrievalResult, VectorStore

logger = logging.getLogger(__name__)


class Retriever:
    """Top-K retrieval over a vector store."""

    def __init__(self, embedder: "Embedder", store: "VectorStore", top_k: int = 5) -> None:
        self.embedder = embedder
        self.store = store
        self.top_k = top_k

    def retrieve(self, query_text: str, k: int | None = None) -> list["RetrievalResult"]:
        """
        Return the chunks most similar to the query.

        Args:
            query_text: Question to search for
            k: Number of results (defaults to the retriever's top_k)

        Returns:
            Results ordered by descending similarity, at most k long

        Raises:
            EmbeddingError: If the query cannot be embedded
            DimensionMismatch: If the embedder and store disagree on dimension
            StoreConnectionError: If the store is unreachable
        """
        k = self.top_k if k is None else k
        query_embedding = self.embedder.embed_query(query_text)
        results = self.store.query(query_embedding, k)

        logger.debug(
            f"Retrieved {len(results)} chunks"
            + (f" (best score {results[0].score:.3f})" if results else "")
        )
        return results
