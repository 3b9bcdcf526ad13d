"""Unit tests for chains.prompts module."""

import pytest

from bedrockrag.chains.prompts import (
    DOC_CHAT_PROMPT_TEMPLATE,
    RAG_PROMPT_TEMPLATE,
    assemble,
    build_context,
    placeholders,
)
from bedrockrag.exceptions import MissingBinding
from bedrockrag.retrieval.chunker import Chunk
from bedrockrag.retrieval.store import RetrievalResult


@pytest.mark.unit
class TestAssemble:
    """Tests for assemble()."""

    def test_substitutes_placeholders(self):
        """Each placeholder is replaced by its binding."""
        assert assemble("{{context}} {{question}}", {"context": "C", "question": "Q"}) == "C Q"

    def test_missing_binding(self):
        """An unbound placeholder is reported by name."""
        with pytest.raises(MissingBinding) as exc_info:
            assemble("{{context}} {{question}}", {"context": "C"})

        assert exc_info.value.name == "question"

    def test_extra_bindings_ignored(self):
        """Bindings without a placeholder are simply unused."""
        assert assemble("{{question}}", {"question": "Q", "unused": "X"}) == "Q"

    @pytest.mark.parametrize("placeholder", ["{{question}}", "{{ question }}", "{{.question}}"])
    def test_placeholder_spellings(self, placeholder):
        """Spaced and dotted placeholder forms are accepted."""
        assert assemble(f"Q: {placeholder}", {"question": "why?"}) == "Q: why?"

    def test_repeated_placeholder(self):
        """A placeholder used twice is filled twice."""
        assert assemble("{{x}}-{{x}}", {"x": "1"}) == "1-1"

    def test_values_are_not_rescanned(self):
        """Substituted text containing braces is left as is."""
        result = assemble("{{context}}", {"context": "{{question}}"})

        assert result == "{{question}}"

    def test_no_placeholders(self):
        """A template without placeholders is returned unchanged."""
        assert assemble("plain text", {}) == "plain text"


@pytest.mark.unit
class TestTemplates:
    """Tests for the bundled templates."""

    def test_placeholders_in_order(self):
        """placeholders() lists names as they appear."""
        assert placeholders("{{ a }} {{.b}} {{c}}") == ["a", "b", "c"]

    def test_rag_template_bindings(self):
        """The RAG template takes a question and a context."""
        assert sorted(set(placeholders(RAG_PROMPT_TEMPLATE))) == ["context", "question"]

    def test_doc_chat_template(self):
        """The document chat template puts the question after the document."""
        prompt = assemble(DOC_CHAT_PROMPT_TEMPLATE, {"context": "DOC", "question": "what?"})

        assert prompt == "DOC\nBased on the information above, what?"


@pytest.mark.unit
class TestBuildContext:
    """Tests for build_context()."""

    def test_joins_in_rank_order(self):
        """Chunks are concatenated in the order retrieved."""
        results = [
            RetrievalResult(Chunk(content="second best"), 0.5),
            RetrievalResult(Chunk(content="best"), 0.9),
        ]

        assert build_context(results, delimiter=" | ") == "second best | best"

    def test_empty_results(self):
        """No results means an empty context."""
        assert build_context([]) == ""
