"""
Interactive query loop.

Reads one line at a time until EOF. Blank lines are ignored. Each
non-blank line is answered by the injected callable and printed. A failed
turn is reported and skipped when its error is recoverable; any other
error ends the loop.
"""

import logging
import sys
from collections.abc import Callable
from enum import Enum
from typing import TextIO

from rich.console import Console
from rich.markup import escape

from bedrockrag.exceptions import BedrockRAGError

logger = logging.getLogger(__name__)

PROMPT = "\nEnter your message: "


class LoopState(str, Enum):
    """States of the query loop."""

    AWAITING_INPUT = "awaiting_input"
    PROCESSING = "processing"


class QueryLoop:
    """Read-eval-print loop around a question answerer."""

    def __init__(
        self,
        answer: Callable[[str], str],
        console: Console | None = None,
        stream: TextIO | None = None,
        label: str = "Model response",
    ) -> None:
        self.answer = answer
        self.console = console or Console()
        self.stream = stream or sys.stdin
        self.label = label
        self.state = LoopState.AWAITING_INPUT
        self.turns = 0
        self.failed_turns = 0

    def run(self) -> int:
        """
        Serve questions until the input stream is exhausted.

        Returns:
            Number of questions answered successfully

        Raises:
            BedrockRAGError: The first non-recoverable error
        """
        while True:
            self.state = LoopState.AWAITING_INPUT
            self.console.print(PROMPT, end="", markup=False)

            line = self.stream.readline()
            if not line:
                # EOF
                self.console.print()
                return self.turns

            question = line.strip()
            if not question:
                continue

            self.state = LoopState.PROCESSING
            self._process(question)

    def _process(self, question: str) -> None:
        try:
            response = self.answer(question)
        except BedrockRAGError as e:
            if not e.recoverable:
                logger.error(f"Aborting: {e}")
                raise
            self.failed_turns += 1
            logger.error(f"Query failed: {e}")
            self.console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
            return

        self.turns += 1
        self.console.print(f"[green]\\[{self.label}]:[/green] ", end="")
        self.console.print(response, markup=False, highlight=False)
