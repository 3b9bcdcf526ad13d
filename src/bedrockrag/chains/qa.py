"""
Question-answering chains.

RAGChain: retrieve top-K chunks, stuff them into the prompt, generate.
DocumentChat: stuff whole documents into the prompt, generate.

Both take their collaborators as constructor arguments and expose
``answer(question) -> str`` for the query loop.
"""

import logging
from typing import TYPE_CHECKING

from bedrockrag.chains.prompts import (
    DOC_CHAT_PROMPT_TEMPLATE,
    RAG_PROMPT_TEMPLATE,
    assemble,
    build_context,
)

if TYPE_CHECKING:
    from bedrockrag.llm.factory import LLMProtocol
    from bedrockrag.retrieval.loader import Document
    from bedrockrag.retrieval.retriever import Retriever

logger = logging.getLogger(__name__)


class RAGChain:
    """
    Retrieval-augmented question answering.

    Example:
        >>> chain = RAGChain(Retriever(embedder, store, top_k=5), llm)
        >>> chain.answer("What is Bedrock Studio?")
    """

    def __init__(
        self,
        retriever: "Retriever",
        llm: "LLMProtocol",
        template: str = RAG_PROMPT_TEMPLATE,
        max_tokens: int | None = None,
        delimiter: str = "\n\n",
    ) -> None:
        self.retriever = retriever
        self.llm = llm
        self.template = template
        self.max_tokens = max_tokens
        self.delimiter = delimiter

    def build_prompt(self, question: str) -> str:
        """
        Retrieve context for a question and render the prompt.

        Raises:
            EmbeddingError: If the question cannot be embedded
            StoreConnectionError: If the store is unreachable
            MissingBinding: If the template needs more than context/question
        """
        question = question.strip()
        results = self.retriever.retrieve(question)
        context = build_context(results, self.delimiter)
        return assemble(self.template, {"context": context, "question": question})

    def answer(self, question: str) -> str:
        """
        Answer a question from the stored documents.

        Raises:
            GenerationError: If the model call fails
            (plus anything ``build_prompt`` raises)
        """
        prompt = self.build_prompt(question)
        logger.debug(f"Prompt is {len(prompt)} characters")
        return self.llm.invoke(prompt, max_tokens=self.max_tokens)


class DocumentChat:
    """Question answering with whole documents as context."""

    def __init__(
        self,
        documents: list["Document"],
        llm: "LLMProtocol",
        template: str = DOC_CHAT_PROMPT_TEMPLATE,
        max_tokens: int | None = None,
        delimiter: str = "\n\n",
    ) -> None:
        self.llm = llm
        self.template = template
        self.max_tokens = max_tokens
        self.context = delimiter.join(document.content for document in documents)

    def answer(self, question: str) -> str:
        """
        Answer a question about the loaded documents.

        Raises:
            GenerationError: If the model call fails
            MissingBinding: If the template needs more than context/question
        """
        prompt = assemble(self.template, {"context": self.context, "question": question.strip()})
        return self.llm.invoke(prompt, max_tokens=self.max_tokens)
