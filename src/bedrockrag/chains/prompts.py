"""
Prompt templates and assembly.

Templates use ``{{name}}`` placeholders (``{{ name }}`` and ``{{.name}}``
are accepted too). Assembly is plain substitution: every placeholder must
be bound, extra bindings are ignored.
"""

import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from bedrockrag.exceptions import MissingBinding

if TYPE_CHECKING:
    from bedrockrag.retrieval.store import RetrievalResult

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*\.?([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")

# Answer strictly from search results.
RAG_PROMPT_TEMPLATE = """
A chat between a curious User and an artificial intelligence Bot. The Bot gives helpful, detailed, and polite answers to the User's questions.

In this session, the model has access to search results and a user's question, your job is to answer the user's question using only information from the search results.

Model Instructions:
- You should provide concise answer to simple questions when the answer is directly contained in search results, but when comes to yes/no question, provide some details.
- In case the question requires multi-hop reasoning, you should find relevant information from search results and summarize the answer based on relevant information with logical reasoning.
- If the search results do not contain information that can answer the question, please state that you could not find an exact answer to the question, and if search results are completely irrelevant, say that you could not find an exact answer, then summarize search results.
- DO NOT USE INFORMATION THAT IS NOT IN SEARCH RESULTS!

User: {{question}}
Resource: Search Results: {{context}} Bot:"""

# Question answering over a whole document.
DOC_CHAT_PROMPT_TEMPLATE = "{{context}}\nBased on the information above, {{question}}"


def placeholders(template: str) -> list[str]:
    """Names of the placeholders in a template, in order of appearance."""
    return [match.group(1) for match in PLACEHOLDER_PATTERN.finditer(template)]


def assemble(template: str, bindings: Mapping[str, str]) -> str:
    """
    Render a template.

    Args:
        template: Template text with ``{{name}}`` placeholders
        bindings: Values for the placeholders

    Returns:
        The rendered prompt

    Raises:
        MissingBinding: If a placeholder has no binding (the first one found)

    Example:
        >>> assemble("{{context}} {{question}}", {"context": "C", "question": "Q"})
        'C Q'
    """
    for name in placeholders(template):
        if name not in bindings:
            raise MissingBinding(name)

    return PLACEHOLDER_PATTERN.sub(lambda match: str(bindings[match.group(1)]), template)


def build_context(results: Iterable["RetrievalResult"], delimiter: str = "\n\n") -> str:
    """Join retrieved chunk texts in ranked order."""
    return delimiter.join(result.chunk.content for result in results)
