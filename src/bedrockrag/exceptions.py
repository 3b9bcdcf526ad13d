"""
Exception hierarchy for bedrockrag.

Every component raises one of these; callers decide whether to continue.
``recoverable`` marks errors the query loop may report and move past
(a single failed turn), as opposed to errors that mean the pipeline itself
is misconfigured.
"""


class BedrockRAGError(Exception):
    """Base class for all bedrockrag errors."""

    recoverable: bool = False


class ConfigError(BedrockRAGError):
    """Invalid settings, credentials or region."""


class FetchError(BedrockRAGError):
    """Document source unreachable or returned a non-success status."""

    recoverable = True

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class EmbeddingError(BedrockRAGError):
    """The embedding backend failed to produce a vector."""

    recoverable = True


class DimensionMismatch(BedrockRAGError):
    """A vector's dimension differs from the store's established dimension."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected vectors of dimension {expected}, got {actual}")


class StoreConnectionError(BedrockRAGError):
    """The vector store's backing storage is unreachable."""

    recoverable = True


class GenerationError(BedrockRAGError):
    """The generation backend failed or returned no usable candidate."""

    recoverable = True


class MissingBinding(BedrockRAGError):
    """A template placeholder has no matching binding."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No binding for template placeholder '{name}'")
