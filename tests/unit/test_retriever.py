"""Unit tests for retrieval.retriever module."""

from unittest.mock import MagicMock

import pytest

from bedrockrag.exceptions import EmbeddingError, StoreConnectionError
from bedrockrag.retrieval.retriever import Retriever
from bedrockrag.retrieval.store import FAISSVectorStore


@pytest.mark.unit
class TestRetriever:
    """Tests for Retriever class."""

    def test_query_close_to_chunk_returns_it_first(self, fake_embedder, faiss_store, sample_chunks):
        """The chunk nearest the question ranks first."""
        embedder = fake_embedder({"How are workspaces organised?": [0.1, 0.95, 0.2]})
        retriever = Retriever(embedder, faiss_store, top_k=3)

        results = retriever.retrieve("How are workspaces organised?")

        assert results[0].chunk == sample_chunks[1]
        assert len(results) == 3

    def test_default_top_k(self, fake_embedder, faiss_store):
        """top_k bounds the number of results."""
        retriever = Retriever(fake_embedder({"q": [1.0, 0.0, 0.0]}), faiss_store, top_k=2)

        assert len(retriever.retrieve("q")) == 2

    def test_explicit_k_overrides_default(self, fake_embedder, faiss_store):
        """A per-call k wins over the configured top_k."""
        retriever = Retriever(fake_embedder({"q": [1.0, 0.0, 0.0]}), faiss_store, top_k=5)

        assert len(retriever.retrieve("q", k=1)) == 1

    def test_empty_store(self, fake_embedder):
        """An empty store yields no results."""
        retriever = Retriever(fake_embedder({"q": [1.0, 0.0, 0.0]}), FAISSVectorStore(dimension=3))

        assert retriever.retrieve("q") == []

    def test_embedding_error_propagates(self, faiss_store):
        """Embedding failures are not swallowed."""
        embedder = MagicMock()
        embedder.embed_query.side_effect = EmbeddingError("throttled")

        with pytest.raises(EmbeddingError):
            Retriever(embedder, faiss_store).retrieve("q")

    def test_store_error_propagates(self, fake_embedder):
        """Store failures are not swallowed."""
        store = MagicMock()
        store.query.side_effect = StoreConnectionError("database is down")

        with pytest.raises(StoreConnectionError):
            Retriever(fake_embedder(), store).retrieve("q")

    def test_passes_embedding_to_store(self, fake_embedder):
        """The store is queried with the question's embedding."""
        store = MagicMock()
        store.query.return_value = []
        embedder = fake_embedder({"q": [0.0, 1.0, 0.0]})

        Retriever(embedder, store, top_k=4).retrieve("q")

        vector, k = store.query.call_args.args
        assert list(vector) == [0.0, 1.0, 0.0]
        assert k == 4
