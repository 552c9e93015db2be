"""Terminal prompt for choosing between candidate versions.

Reads one line from stdin with a deadline, so an unattended run never
blocks forever on an ambiguous catalog.
"""

from __future__ import annotations

import select
import sys
import time
from collections.abc import Sequence
from typing import TextIO

from kernrepo.core.cancel import CancelToken
from kernrepo.core.resolver import PromptOutcome, Prompter
from kernrepo.models.token import VersionToken
from kernrepo.utils.formatting import console, print_warning

# select() resumes after a signal handler returns, so wait in slices
POLL_INTERVAL = 0.2


class TerminalPrompter(Prompter):
    """Prompter reading numbered choices from a terminal.

    Attributes:
        stream: Input stream to read the answer from.
        cancel: Token that ends the wait early when cancelled.
    """

    def __init__(self, stream: TextIO | None = None, cancel: CancelToken | None = None) -> None:
        self.stream = stream or sys.stdin
        self.cancel = cancel

    def ask(
        self,
        family: str,
        candidates: Sequence[VersionToken],
        timeout: float,
    ) -> PromptOutcome:
        """Show the candidates and read one line within the timeout."""
        console.print(f"\n[bold_header]Several versions of {family} are available:[/]")
        for index, token in enumerate(candidates, start=1):
            console.print(f"  [info]{index}[/] {token.version}")
        console.print(f"Choose 1-{len(candidates)} ({timeout:g}s): ", end="")

        if not self._wait_readable(timeout):
            console.print()
            return PromptOutcome(answer=None)
        return PromptOutcome(answer=self.stream.readline())

    def reject(self, answer: str, count: int) -> None:
        """Explain why the answer was not accepted."""
        print_warning(f"'{answer}' is not a number between 1 and {count}.")

    def _wait_readable(self, timeout: float) -> bool:
        deadline = time.monotonic() + timeout
        while self.cancel is None or not self.cancel.cancelled:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            ready, _, _ = select.select([self.stream], [], [], min(remaining, POLL_INTERVAL))
            if ready:
                return True
        return False
