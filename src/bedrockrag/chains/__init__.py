"""
Prompt assembly and the question-answering chains built on it.

Components:
    - prompts: Templates and the ``assemble`` function
    - qa: RAGChain and DocumentChat
    - loop: Interactive query loop
"""

from bedrockrag.chains.loop import LoopState, QueryLoop
from bedrockrag.chains.prompts import (
    DOC_CHAT_PROMPT_TEMPLATE,
    RAG_PROMPT_TEMPLATE,
    assemble,
    build_context,
)
from bedrockrag.chains.qa import DocumentChat, RAGChain

__all__ = [
    "LoopState",
    "QueryLoop",
    "DOC_CHAT_PROMPT_TEMPLATE",
    "RAG_PROMPT_TEMPLATE",
    "assemble",
    "build_context",
    "DocumentChat",
    "RAGChain",
]
