"""
Document loading and the one-shot ingestion pass.

Fetches a single page over HTTP, reduces its HTML to text, and (for the
RAG program) chunks, embeds and stores it before any query is served.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx
from bs4 import BeautifulSoup

from bedrockrag.exceptions import FetchError
from bedrockrag.retrieval.chunker import Chunk, split_documents

if TYPE_CHECKING:
    from bedrockrag.retrieval.embeddings import Embedder
    from bedrockrag.retrieval.store import VectorStore

logger = logging.getLogger(__name__)

_BLANK_LINES = re.compile(r"\n\s*\n+")


@dataclass(frozen=True)
class Document:
    """Raw page text plus where it came from."""

    content: str
    metadata: dict[str, str | int] = field(default_factory=dict)


def html_to_text(html: str) -> str:
    """
    Extract readable text from an HTML page.

    Script, style and noscript elements are dropped; runs of blank lines
    collapse to a single paragraph break.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()

    text = soup.get_text(separator="\n")
    lines = [line.strip() for line in text.splitlines()]
    return _BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()


def fetch_document(url: str, timeout: float = 30.0) -> Document:
    """
    Download a page and turn it into a Document.

    Args:
        url: Page to fetch
        timeout: Request timeout in seconds

    Returns:
        Document whose metadata records the source URL

    Raises:
        FetchError: On network failure or a non-2xx response
    """
    logger.info(f"Loading data from {url}")

    try:
        with httpx.Client(timeout=timeout, follow_redirects=True) as client:
            response = client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise FetchError(url, f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise FetchError(url, str(e) or type(e).__name__) from e

    content_type = response.headers.get("content-type", "")
    if "html" in content_type or not content_type:
        text = html_to_text(response.text)
    else:
        text = response.text

    logger.debug(f"Fetched {len(response.content)} bytes, {len(text)} characters of text")
    return Document(content=text, metadata={"source": url})


def ingest(
    documents: list[Document],
    embedder: "Embedder",
    store: "VectorStore",
    chunk_size: int,
    overlap: int,
) -> int:
    """
    Chunk, embed and store documents.

    Args:
        documents: Documents to load
        embedder: Embedder used for every chunk
        store: Destination vector store
        chunk_size: Maximum chunk size in characters
        overlap: Overlap between consecutive chunks

    Returns:
        Number of entries added to the store

    Raises:
        EmbeddingError: If embedding any chunk fails
        DimensionMismatch: If the embedder's vectors do not fit the store
        StoreConnectionError: If the store is unreachable
    """
    chunks: list[Chunk] = list(split_documents(documents, chunk_size, overlap))
    logger.info(f"No. of document chunks to be loaded: {len(chunks)}")

    if not chunks:
        return 0

    embeddings = embedder.embed_texts([chunk.content for chunk in chunks])
    added = store.add(list(zip(chunks, embeddings)))

    logger.info(f"Loaded {added} chunks into the vector store")
    return added
