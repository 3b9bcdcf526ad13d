"""
bedrockrag: question answering over web pages with Amazon Bedrock

This package provides three small programs around a hosted LLM: a single
prompt, chat over a whole document, and retrieval-augmented generation
(RAG) backed by a vector store.

Key Components:
    - retrieval: Page loading, chunking, embeddings, vector stores, retriever
    - chains: Prompt assembly, RAG and document chat, the query loop
    - llm: Bedrock and OpenAI-compatible generation clients
    - cli: Typer commands (basic, doc-chat, rag)

Example:
    >>> from bedrockrag.chains import RAGChain
    >>> chain = RAGChain(retriever, llm)
    >>> print(chain.answer("What is Amazon Bedrock Studio?"))
"""

__version__ = "0.1.0"

from bedrockrag.config import Settings, get_settings

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
]
