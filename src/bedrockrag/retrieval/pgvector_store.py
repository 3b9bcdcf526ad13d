"""
Postgres + pgvector vector store.

The store owns its schema: on first use it enables the ``vector`` extension
and creates a collection table keyed by an identity column, which doubles
as insertion order for tie-breaking. Similarity is cosine (``<=>``).

Dependencies: sqlalchemy, psycopg
"""

import json
import logging
import math
import re
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

import numpy as np
from numpy.typing import ArrayLike
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError, OperationalError, ProgrammingError

from bedrockrag.exceptions import ConfigError, DimensionMismatch, StoreConnectionError
from bedrockrag.retrieval.chunker import Chunk
from bedrockrag.retrieval.store import Entry, RetrievalResult, stack_vectors

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _vector_literal(vector: ArrayLike) -> str:
    """Render a vector in pgvector's text input format."""
    values = np.asarray(vector, dtype=np.float32).reshape(-1)
    return "[" + ",".join(repr(float(v)) for v in values) + "]"


class PGVectorStore:
    """
    Vector store backed by a Postgres table with a pgvector column.

    Example:
        >>> store = PGVectorStore(settings.pg_connection_url, "docs", dimension=1536)
        >>> store.add(list(zip(chunks, embeddings)))
        >>> results = store.query(query_embedding, k=5)
    """

    def __init__(
        self,
        connection_url: str,
        collection: str,
        dimension: int | None = None,
        pre_delete_collection: bool = False,
        engine: Engine | None = None,
    ) -> None:
        """
        Initialize the store and make sure its table exists.

        Args:
            connection_url: SQLAlchemy URL of the Postgres database
            collection: Table name for this collection
            dimension: Vector dimension; if None it is read from existing
                rows or fixed by the first add
            pre_delete_collection: Drop the table before use
            engine: Pre-built engine (mostly for tests)

        Raises:
            ValueError: If the collection name is not a plain identifier
            StoreConnectionError: If the database is unreachable
            ConfigError: If the schema cannot be created (e.g. no pgvector extension)
            DimensionMismatch: If stored rows disagree with ``dimension``
        """
        if not _IDENTIFIER.match(collection):
            raise ValueError(f"Invalid collection name: {collection!r}")

        self.collection = collection
        self.dimension = dimension
        self._engine = engine or create_engine(connection_url, pool_pre_ping=True)

        with self._connect() as conn:
            if pre_delete_collection:
                logger.info(f"Dropping collection {collection}")
                conn.execute(text(f"DROP TABLE IF EXISTS {collection}"))
            self._create_schema(conn)

        stored = self._stored_dimension()
        if stored is not None:
            if self.dimension is not None and stored != self.dimension:
                raise DimensionMismatch(self.dimension, stored)
            self.dimension = stored

        logger.info(f"Vector store ready ({collection}, {self.size} entries)")

    @property
    def size(self) -> int:
        """Number of stored entries."""
        with self._connect() as conn:
            return int(conn.execute(text(f"SELECT count(*) FROM {self.collection}")).scalar_one())

    def add(self, entries: Sequence[Entry]) -> int:
        """
        Insert chunks and their embeddings in a single transaction.

        Raises:
            DimensionMismatch: If any vector has the wrong dimension
            StoreConnectionError: If the database is unreachable
        """
        if not entries:
            return 0

        vectors = stack_vectors(entries, self.dimension)

        rows: list[dict[str, Any]] = [
            {
                "document": chunk.content,
                "cmetadata": json.dumps({**chunk.metadata, "overlap": chunk.overlap}),
                "embedding": _vector_literal(vector),
            }
            for (chunk, _), vector in zip(entries, vectors)
        ]

        with self._connect() as conn:
            conn.execute(
                text(
                    f"INSERT INTO {self.collection} (document, cmetadata, embedding) "
                    "VALUES (:document, CAST(:cmetadata AS jsonb), CAST(:embedding AS vector))"
                ),
                rows,
            )

        self.dimension = vectors.shape[1]
        logger.debug(f"Inserted {len(rows)} rows into {self.collection}")
        return len(rows)

    def query(self, vector: ArrayLike, k: int) -> list[RetrievalResult]:
        """
        Return the k nearest entries by cosine distance.

        Raises:
            DimensionMismatch: If the query has the wrong dimension
            StoreConnectionError: If the database is unreachable
        """
        if k <= 0:
            return []

        query = np.asarray(vector, dtype=np.float32).reshape(-1)
        if self.dimension is None:
            # Nothing has been stored yet.
            return []
        if len(query) != self.dimension:
            raise DimensionMismatch(self.dimension, len(query))

        with self._connect() as conn:
            rows = conn.execute(
                text(
                    "SELECT document, cmetadata, "
                    "1 - (embedding <=> CAST(:query AS vector)) AS score "
                    f"FROM {self.collection} "
                    "ORDER BY embedding <=> CAST(:query AS vector), id "
                    "LIMIT :k"
                ),
                {"query": _vector_literal(query), "k": k},
            ).all()

        results = []
        for document, cmetadata, score in rows:
            metadata = dict(cmetadata or {})
            overlap = int(metadata.pop("overlap", 0))
            results.append(
                RetrievalResult(
                    chunk=Chunk(content=document, metadata=metadata, overlap=overlap),
                    # NaN when either vector is all zeros
                    score=0.0 if score is None or math.isnan(score) else float(score),
                )
            )
        return results

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        """
        Open a transaction, mapping database errors onto the bedrockrag hierarchy.

        Connection failures and other driver errors become StoreConnectionError;
        schema or permission problems (ProgrammingError) become ConfigError.
        """
        try:
            with self._engine.begin() as conn:
                yield conn
        except OperationalError as e:
            raise StoreConnectionError(f"Vector store unreachable: {e.orig or e}") from e
        except ProgrammingError as e:
            raise ConfigError(f"Vector store schema error: {e.orig or e}") from e
        except DBAPIError as e:
            raise StoreConnectionError(f"Vector store error: {e.orig or e}") from e

    def _create_schema(self, conn: Connection) -> None:
        conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        conn.execute(
            text(
                f"CREATE TABLE IF NOT EXISTS {self.collection} ("
                "id BIGINT GENERATED ALWAYS AS IDENTITY PRIMARY KEY, "
                "document TEXT NOT NULL, "
                "cmetadata JSONB NOT NULL DEFAULT '{}'::jsonb, "
                "embedding vector NOT NULL)"
            )
        )

    def _stored_dimension(self) -> int | None:
        with self._connect() as conn:
            return conn.execute(
                text(f"SELECT vector_dims(embedding) FROM {self.collection} ORDER BY id LIMIT 1")
            ).scalar_one_or_none()
