"""
Vector store interface and the FAISS implementation.

Stores are append-only: entries are added during the load phase and only
queried afterwards. Results are ordered by descending cosine similarity,
with ties going to the entry that was added first.
"""

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import NamedTuple, Protocol

import faiss
import numpy as np
from numpy.typing import ArrayLike, NDArray

from bedrockrag.exceptions import DimensionMismatch
from bedrockrag.retrieval.chunker import Chunk
from bedrockrag.retrieval.embeddings import normalize_embeddings

logger = logging.getLogger(__name__)

# Scores within this distance of the k-th score are treated as ties.
_TIE_TOLERANCE = 1e-6


class RetrievalResult(NamedTuple):
    """A stored chunk and its similarity to the query."""

    chunk: Chunk
    score: float


Entry = tuple[Chunk, ArrayLike]


class VectorStore(Protocol):
    """Protocol that all vector stores implement."""

    @property
    def size(self) -> int:
        """Number of stored entries."""
        ...

    def add(self, entries: Sequence[Entry]) -> int:
        """Store (chunk, vector) pairs and return how many were added."""
        ...

    def query(self, vector: ArrayLike, k: int) -> list[RetrievalResult]:
        """Return up to k entries most similar to vector."""
        ...


def stack_vectors(entries: Sequence[Entry], expected: int | None) -> NDArray[np.float32]:
    """
    Stack entry vectors into a 2-D array, checking every dimension.

    Args:
        entries: (chunk, vector) pairs
        expected: Required dimension, or None to take the first vector's

    Returns:
        Array of shape (len(entries), dimension)

    Raises:
        DimensionMismatch: If any vector's dimension differs
    """
    vectors = [np.asarray(vector, dtype=np.float32).reshape(-1) for _, vector in entries]
    dimension = expected if expected is not None else len(vectors[0])

    for vector in vectors:
        if len(vector) != dimension:
            raise DimensionMismatch(dimension, len(vector))

    return np.vstack(vectors)


class FAISSVectorStore:
    """
    FAISS-based in-process vector store.

    Uses IndexFlatIP (inner product) over normalized vectors for cosine
    similarity. Stores chunks alongside vectors for result enrichment.

    Example:
        >>> store = FAISSVectorStore(dimension=1536)
        >>> store.add(list(zip(chunks, embeddings)))
        >>> results = store.query(query_embedding, k=5)
        >>> store.save("data/index/faiss.index")
    """

    def __init__(self, dimension: int | None = None) -> None:
        """
        Initialize an empty store.

        Args:
            dimension: Vector dimension; if None it is fixed by the first add
        """
        self.dimension = dimension
        self._index: faiss.IndexFlatIP | None = None
        self._chunks: list[Chunk] = []

    @property
    def size(self) -> int:
        """Number of vectors in the store."""
        if self._index is None:
            return 0
        return int(self._index.ntotal)

    def add(self, entries: Sequence[Entry]) -> int:
        """
        Append chunks and their embeddings.

        All vectors are validated before anything is written, so a rejected
        batch leaves the store unchanged.

        Args:
            entries: (chunk, vector) pairs

        Returns:
            Number of entries added

        Raises:
            DimensionMismatch: If any vector has the wrong dimension
        """
        if not entries:
            return 0

        vectors = stack_vectors(entries, self.dimension)

        if self._index is None:
            self.dimension = vectors.shape[1]
            self._index = faiss.IndexFlatIP(self.dimension)

        self._index.add(np.ascontiguousarray(normalize_embeddings(vectors)))
        self._chunks.extend(chunk for chunk, _ in entries)

        logger.debug(f"Added {len(entries)} vectors (total {self.size})")
        return len(entries)

    def query(self, vector: ArrayLike, k: int) -> list[RetrievalResult]:
        """
        Search for similar chunks.

        Args:
            vector: Query vector of shape (dimension,)
            k: Number of results to return

        Returns:
            Up to k results sorted by score descending, earliest entry first
            among equal scores; empty if the store is empty

        Raises:
            DimensionMismatch: If the query has the wrong dimension
        """
        query = np.asarray(vector, dtype=np.float32).reshape(1, -1)
        if self.dimension is not None and query.shape[1] != self.dimension:
            raise DimensionMismatch(self.dimension, query.shape[1])

        if self._index is None or self.size == 0 or k <= 0:
            return []

        query = np.ascontiguousarray(normalize_embeddings(query))
        k = min(k, self.size)

        scores, _ = self._index.search(query, k)
        cutoff = float(scores[0][-1])

        # FAISS does not order equal scores by id; collect everything that
        # scores at least as well as the k-th hit and order it ourselves.
        lims, range_scores, range_ids = self._index.range_search(query, cutoff - _TIE_TOLERANCE)
        candidates = sorted(
            zip(range_scores[lims[0] : lims[1]], range_ids[lims[0] : lims[1]]),
            key=lambda pair: (-float(pair[0]), int(pair[1])),
        )

        return [
            RetrievalResult(chunk=self._chunks[int(idx)], score=float(score))
            for score, idx in candidates[:k]
        ]

    def save(self, path: str | Path) -> None:
        """
        Save index and chunk metadata to disk.

        Args:
            path: Base path for index files (``.index`` and ``.json``)

        Raises:
            RuntimeError: If nothing has been added yet
        """
        if self._index is None:
            raise RuntimeError("Store is empty. Call add() first.")

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        faiss.write_index(self._index, str(path.with_suffix(".index")))

        chunks_data = [
            {
                "content": chunk.content,
                "metadata": chunk.metadata,
                "overlap": chunk.overlap,
            }
            for chunk in self._chunks
        ]

        with path.with_suffix(".json").open("w", encoding="utf-8") as f:
            json.dump(chunks_data, f, indent=2, ensure_ascii=False)

    def load(self, path: str | Path) -> None:
        """
        Load index and chunk metadata from disk.

        Args:
            path: Base path to index files

        Raises:
            FileNotFoundError: If index files don't exist
            DimensionMismatch: If the saved index has a different dimension
        """
        path = Path(path)

        index_file = path.with_suffix(".index")
        if not index_file.exists():
            raise FileNotFoundError(f"Index file not found: {index_file}")

        metadata_file = path.with_suffix(".json")
        if not metadata_file.exists():
            raise FileNotFoundError(f"Metadata file not found: {metadata_file}")

        index = faiss.read_index(str(index_file))
        if self.dimension is not None and index.d != self.dimension:
            raise DimensionMismatch(self.dimension, index.d)

        with metadata_file.open(encoding="utf-8") as f:
            chunks_data = json.load(f)

        self._index = index
        self.dimension = index.d
        self._chunks = [
            Chunk(
                content=chunk_data["content"],
                metadata=chunk_data["metadata"],
                overlap=chunk_data.get("overlap", 0),
            )
            for chunk_data in chunks_data
        ]

    @classmethod
    def from_disk(cls, path: str | Path) -> "FAISSVectorStore":
        """Create a store from saved files."""
        store = cls()
        store.load(path)
        return store
