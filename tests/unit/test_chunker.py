"""Unit tests for retrieval.chunker module."""

import types

import pytest

from bedrockrag.retrieval.chunker import (
    Chunk,
    chunk_text,
    iter_chunks,
    reconstruct,
    split_documents,
)
from bedrockrag.retrieval.loader import Document

PAGE_TEXT = """Amazon Bedrock Studio

Amazon Bedrock Studio is a web app that lets you easily prototype apps that use Amazon Bedrock models and features, without having to set up and use a developer environment. For example, you can use Bedrock Studio to try a prompt with an Anthropic Claude model without having to write any code.

Later, you can use Bedrock Studio to create a prototype app that uses a model and a knowledge base. Members of a workspace can share projects.
Projects are private by default.

To use Bedrock Studio, you must be a member of a workspace. Your organization will provide you with login details. If you don't have login details, contact your administrator."""


@pytest.mark.unit
class TestChunk:
    """Tests for Chunk dataclass."""

    def test_chunk_creation(self):
        """Test creating a Chunk with all fields."""
        chunk = Chunk(
            content="Test content",
            metadata={"source": "https://example.com", "chunk_index": 0},
            overlap=5,
        )
        assert chunk.content == "Test content"
        assert chunk.metadata["source"] == "https://example.com"
        assert chunk.new_content == "content"

    def test_chunk_is_immutable(self):
        """Chunks cannot be reassigned after creation."""
        chunk = Chunk(content="fixed")
        with pytest.raises(AttributeError):
            chunk.content = "changed"


@pytest.mark.unit
class TestIterChunks:
    """Tests for iter_chunks / chunk_text."""

    def test_returns_generator(self):
        """Chunks are produced lazily."""
        assert isinstance(iter_chunks(PAGE_TEXT, 100, 10), types.GeneratorType)

    def test_short_text_is_single_chunk(self):
        """Text no longer than chunk_size yields exactly one identical chunk."""
        chunks = chunk_text("Bedrock Studio", chunk_size=100, overlap=10)

        assert len(chunks) == 1
        assert chunks[0].content == "Bedrock Studio"
        assert chunks[0].overlap == 0
        assert chunks[0].metadata == {"chunk_index": 0, "start_index": 0}

    def test_text_of_exactly_chunk_size_is_single_chunk(self):
        """Boundary: len(text) == chunk_size."""
        text = "x" * 64
        chunks = chunk_text(text, chunk_size=64, overlap=8)

        assert [c.content for c in chunks] == [text]

    def test_whitespace_only_short_text_is_kept(self):
        """Whitespace is content too and is not stripped."""
        chunks = chunk_text("   \n\n\t  ", chunk_size=100, overlap=0)

        assert len(chunks) == 1
        assert chunks[0].content == "   \n\n\t  "

    def test_empty_input(self):
        """Test handling of empty input."""
        assert chunk_text("", chunk_size=100, overlap=0) == []

    @pytest.mark.parametrize(
        "chunk_size,overlap",
        [(0, 0), (-5, 0), (100, -1), (100, 100), (100, 150)],
    )
    def test_invalid_parameters(self, chunk_size, overlap):
        """Invalid sizes are rejected before any work is done."""
        with pytest.raises(ValueError):
            chunk_text("some text", chunk_size=chunk_size, overlap=overlap)

    @pytest.mark.parametrize(
        "text,chunk_size,overlap",
        [
            (PAGE_TEXT, 100, 20),
            (PAGE_TEXT, 57, 0),
            (PAGE_TEXT, 512, 100),
            ("A" * 500, 100, 20),
            ("word " * 120, 50, 10),
            ("line one\nline two\n\n\nline three. And more.\n" * 15, 40, 15),
            ("ab" * 30, 1, 0),
        ],
    )
    def test_bounded_and_lossless(self, text, chunk_size, overlap):
        """Every chunk fits, and the non-overlapping parts rebuild the text."""
        chunks = chunk_text(text, chunk_size=chunk_size, overlap=overlap)

        assert len(chunks) > 1
        assert all(len(chunk.content) <= chunk_size for chunk in chunks)
        assert reconstruct(chunks) == text

    def test_consecutive_chunks_share_overlap(self):
        """Each chunk starts with a suffix of its predecessor, no longer than overlap."""
        chunks = chunk_text(PAGE_TEXT, chunk_size=100, overlap=20)

        assert any(chunk.overlap > 0 for chunk in chunks)
        assert chunks[0].overlap == 0
        for previous, current in zip(chunks, chunks[1:]):
            assert current.overlap <= 20
            assert previous.content.endswith(current.content[: current.overlap])

    def test_hard_cut_overlap_is_exact(self):
        """Without word boundaries the overlap is exactly the requested size."""
        chunks = chunk_text("A" * 500, chunk_size=100, overlap=20)

        assert all(chunk.overlap == 20 for chunk in chunks[1:])

    def test_overlap_starts_on_word_boundary(self):
        """Overlap that would begin mid-word moves to the next word."""
        chunks = chunk_text(PAGE_TEXT, chunk_size=100, overlap=20)

        for chunk in chunks[1:]:
            start = chunk.metadata["start_index"]
            if chunk.overlap and start > 0:
                assert PAGE_TEXT[start - 1].isspace()

    def test_prefers_paragraph_boundaries(self):
        """A paragraph break is preferred over splitting inside a paragraph."""
        text = "a" * 40 + "\n\n" + "b" * 40
        chunks = chunk_text(text, chunk_size=60, overlap=0)

        assert [c.content for c in chunks] == ["a" * 40 + "\n\n", "b" * 40]

    def test_prefers_word_boundaries_over_characters(self):
        """Words are not cut when a space is available."""
        text = "alpha beta gamma delta epsilon zeta eta theta iota kappa"
        chunks = chunk_text(text, chunk_size=20, overlap=0)

        for chunk in chunks[:-1]:
            assert chunk.content.endswith(" ")

    def test_start_index_locates_chunk(self):
        """start_index points at the chunk's position in the source text."""
        chunks = chunk_text(PAGE_TEXT, chunk_size=80, overlap=15)

        for i, chunk in enumerate(chunks):
            start = chunk.metadata["start_index"]
            assert chunk.metadata["chunk_index"] == i
            assert PAGE_TEXT[start : start + len(chunk.content)] == chunk.content

    def test_metadata_is_copied_to_every_chunk(self):
        """Caller metadata is carried onto each chunk."""
        chunks = chunk_text(
            PAGE_TEXT, chunk_size=100, overlap=0, metadata={"source": "https://example.com"}
        )

        assert all(chunk.metadata["source"] == "https://example.com" for chunk in chunks)


@pytest.mark.unit
class TestSplitDocuments:
    """Tests for split_documents."""

    def test_indices_restart_per_document(self):
        """Each document's chunks are numbered from zero."""
        documents = [
            Document(content=PAGE_TEXT, metadata={"source": "a"}),
            Document(content=PAGE_TEXT[:50], metadata={"source": "b"}),
        ]

        chunks = list(split_documents(documents, chunk_size=100, overlap=10))
        b_chunks = [c for c in chunks if c.metadata["source"] == "b"]

        assert len(b_chunks) == 1
        assert b_chunks[0].metadata["chunk_index"] == 0
        assert chunks[0].metadata["source"] == "a"
