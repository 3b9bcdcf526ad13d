"""
Document retrieval components for the RAG pipeline.

Components:
    - loader: Fetch a page and run the chunk/embed/store load phase
    - chunker: Split documents into bounded, overlapping chunks
    - embeddings: Generate vector embeddings via Bedrock or HuggingFace
    - store: Vector store protocol and FAISS implementation
    - pgvector_store: Postgres + pgvector implementation
    - retriever: Top-K retrieval for a query
"""

from bedrockrag.retrieval.chunker import Chunk, chunk_text, iter_chunks, split_documents
from bedrockrag.retrieval.embeddings import BedrockEmbedder, Embedder, HuggingFaceEmbedder
from bedrockrag.retrieval.loader import Document, fetch_document, ingest
from bedrockrag.retrieval.retriever import Retriever
from bedrockrag.retrieval.store import FAISSVectorStore, RetrievalResult, VectorStore

__all__ = [
    "Chunk",
    "chunk_text",
    "iter_chunks",
    "split_documents",
    "BedrockEmbedder",
    "Embedder",
    "HuggingFaceEmbedder",
    "Document",
    "fetch_document",
    "ingest",
    "Retriever",
    "FAISSVectorStore",
    "RetrievalResult",
    "VectorStore",
]
