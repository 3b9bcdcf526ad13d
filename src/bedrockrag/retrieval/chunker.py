"""
Document chunking with metadata preservation.

Splits page text into bounded, overlapping chunks while preserving:
    - Source URL
    - Chunk position (index and character offset)
    - How many leading characters repeat the previous chunk's tail

Every chunk is a contiguous slice of the input, so dropping each chunk's
leading overlap and concatenating the rest gives back the original text.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from langchain_text_splitters import RecursiveCharacterTextSplitter

if TYPE_CHECKING:
    from bedrockrag.retrieval.loader import Document

SEPARATORS = [
    "\n\n",  # Paragraph breaks
    "\n",  # Line breaks
    ". ",  # Sentence ends
    " ",  # Words
    "",  # Character-level fallback
]


@dataclass(frozen=True)
class Chunk:
    """A document chunk with metadata."""

    content: str
    """The text content of the chunk."""

    metadata: dict[str, str | int] = field(default_factory=dict)
    """Metadata containing source, chunk_index and start_index."""

    overlap: int = 0
    """Number of leading characters shared with the previous chunk."""

    @property
    def new_content(self) -> str:
        """The part of the chunk not already covered by its predecessor."""
        return self.content[self.overlap:]


def iter_chunks(
    text: str,
    chunk_size: int,
    overlap: int,
    metadata: Mapping[str, str | int] | None = None,
) -> Iterator[Chunk]:
    """
    Lazily split text into overlapping chunks.

    The text is first cut into non-overlapping segments of at most
    ``chunk_size - overlap`` characters, preferring paragraph, line,
    sentence and word boundaries in that order. Each segment after the
    first is then prefixed with up to ``overlap`` characters of the text
    before it, so no chunk exceeds ``chunk_size``.

    Args:
        text: Text to chunk
        chunk_size: Maximum chunk size in characters
        overlap: Maximum number of characters shared by consecutive chunks
        metadata: Extra metadata copied onto every chunk

    Yields:
        Chunk objects in document order

    Raises:
        ValueError: If chunk_size <= 0 or overlap is negative or >= chunk_size
    """
    _validate(chunk_size, overlap)

    if not text:
        return

    base = dict(metadata or {})

    if len(text) <= chunk_size:
        yield Chunk(content=text, metadata={**base, "chunk_index": 0, "start_index": 0})
        return

    splitter = _build_splitter(chunk_size - overlap)

    body_start = 0
    prev_start = 0
    for index, body in enumerate(splitter.split_text(text)):
        start = body_start
        if index > 0 and overlap > 0:
            start = _overlap_start(text, body_start, overlap, prev_start)

        yield Chunk(
            content=text[start : body_start + len(body)],
            metadata={**base, "chunk_index": index, "start_index": start},
            overlap=body_start - start,
        )

        prev_start = start
        body_start += len(body)


def chunk_text(
    text: str,
    chunk_size: int,
    overlap: int,
    metadata: Mapping[str, str | int] | None = None,
) -> list[Chunk]:
    """Eager variant of :func:`iter_chunks`."""
    return list(iter_chunks(text, chunk_size, overlap, metadata))


def split_documents(
    documents: Iterable["Document"],
    chunk_size: int,
    overlap: int,
) -> Iterator[Chunk]:
    """
    Chunk several documents, carrying each document's metadata.

    Chunk indices restart at zero for every document.
    """
    for document in documents:
        yield from iter_chunks(document.content, chunk_size, overlap, document.metadata)


def reconstruct(chunks: Iterable[Chunk]) -> str:
    """Join chunks back into the text they were cut from."""
    return "".join(chunk.new_content for chunk in chunks)


def _validate(chunk_size: int, overlap: int) -> None:
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0:
        raise ValueError(f"overlap must be non-negative, got {overlap}")
    if overlap >= chunk_size:
        raise ValueError(
            f"overlap ({overlap}) must be less than chunk_size ({chunk_size})"
        )


def _build_splitter(segment_size: int) -> RecursiveCharacterTextSplitter:
    # Separators stay attached to the end of the preceding piece and
    # whitespace is kept, so the segments concatenate back to the input.
    return RecursiveCharacterTextSplitter(
        chunk_size=segment_size,
        chunk_overlap=0,
        length_function=len,
        keep_separator="end",
        strip_whitespace=False,
        is_separator_regex=False,
        separators=SEPARATORS,
    )


def _overlap_start(text: str, body_start: int, overlap: int, prev_start: int) -> int:
    """
    Pick where a chunk's overlap begins.

    Never earlier than the previous chunk's start, so the overlap is a
    suffix of that chunk. A cut that lands mid-word moves forward to the
    next word.
    """
    start = max(body_start - overlap, prev_start)
    if start == 0 or text[start - 1].isspace():
        return start

    tail = text[start:body_start]
    for offset, char in enumerate(tail):
        if char.isspace():
            return start + offset + 1
    return start
