"""Version resolution for ambiguous catalog listings.

A remote catalog can list several versions of the same family. The
VersionResolver reduces each family to exactly one token, in this order:

1. a single candidate is taken as is;
2. a preferred version (the current one, when that policy is on) wins if
   it is still listed;
3. with "prefer newest" the maximum candidate wins;
4. otherwise the user picks, each attempt bounded by a timeout.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from kernrepo.core.cancel import CancelToken
from kernrepo.core.errors import InteractiveTimeoutError
from kernrepo.core.state import ResolvedSet
from kernrepo.models.token import VersionToken

logger = logging.getLogger(__name__)

DEFAULT_PROMPT_TIMEOUT = 30.0


@dataclass(frozen=True, slots=True)
class PromptOutcome:
    """Result of one bounded prompt.

    Attributes:
        answer: Text entered by the user, or None when the timeout expired.
    """

    answer: str | None

    @property
    def timed_out(self) -> bool:
        """Check if the prompt expired without an answer."""
        return self.answer is None


class Prompter(ABC):
    """Interactive channel used to pick one of several candidates."""

    @abstractmethod
    def ask(
        self,
        family: str,
        candidates: Sequence[VersionToken],
        timeout: float,
    ) -> PromptOutcome:
        """Show the numbered candidates and wait for one answer.

        Args:
            family: Family being resolved.
            candidates: Ordered candidates, numbered from 1.
            timeout: Seconds to wait before giving up.

        Returns:
            PromptOutcome with the raw answer, or a timed-out outcome.
        """

    def reject(self, answer: str, count: int) -> None:  # noqa: B027
        """Report an unusable answer before asking again."""


class VersionResolver:
    """Reduces grouped candidates to one token per family.

    Attributes:
        prompter: Interactive channel for the last-resort choice, if any.
        timeout: Seconds allowed for each prompt attempt.
        cancel: Token checked around every prompt, if any.
    """

    def __init__(
        self,
        prompter: Prompter | None = None,
        timeout: float = DEFAULT_PROMPT_TIMEOUT,
        cancel: CancelToken | None = None,
    ) -> None:
        self.prompter = prompter
        self.timeout = timeout
        self.cancel = cancel

    def resolve(
        self,
        grouped: Mapping[str, Sequence[VersionToken]],
        prefer_newest: bool = False,
        preferred: Mapping[str, VersionToken] | None = None,
    ) -> ResolvedSet:
        """Pick one token for every family.

        Args:
            grouped: Candidates per family.
            prefer_newest: Resolve remaining ambiguity to the newest candidate.
            preferred: Preferred token per family (e.g. the current one).

        Returns:
            Mapping of family to the chosen token.

        Raises:
            InteractiveTimeoutError: If a prompt expired without an answer.
            SyncCancelled: If cancellation was requested while prompting.
        """
        preferred = preferred or {}
        resolved: ResolvedSet = {}

        for family in sorted(grouped):
            candidates = sorted(grouped[family])
            if not candidates:
                continue
            resolved[family] = self._resolve_family(
                family, candidates, prefer_newest, preferred.get(family)
            )

        return resolved

    def _resolve_family(
        self,
        family: str,
        candidates: list[VersionToken],
        prefer_newest: bool,
        preferred: VersionToken | None,
    ) -> VersionToken:
        if len(candidates) == 1:
            return candidates[0]

        if preferred is not None and preferred in candidates:
            logger.debug("Keeping preferred %s among %d candidates", preferred, len(candidates))
            return candidates[candidates.index(preferred)]

        if prefer_newest:
            return max(candidates)

        return self._choose(family, candidates)

    def _choose(self, family: str, candidates: list[VersionToken]) -> VersionToken:
        if self.prompter is None:
            msg = f"{family} has {len(candidates)} candidate versions and no way to choose"
            raise InteractiveTimeoutError(msg)

        what = f"choosing a version of {family}"
        while True:
            self._checkpoint(what)
            outcome = self.prompter.ask(family, candidates, self.timeout)
            # An interruption cuts the prompt short; it is not a timeout
            self._checkpoint(what)
            if outcome.answer is None:
                msg = f"No version of {family} selected within {self.timeout:g}s"
                raise InteractiveTimeoutError(msg)

            answer = outcome.answer.strip()
            if answer.isdigit() and 1 <= int(answer) <= len(candidates):
                choice = candidates[int(answer) - 1]
                logger.info("Selected %s for %s", choice, family)
                return choice

            self.prompter.reject(answer, len(candidates))

    def _checkpoint(self, what: str) -> None:
        if self.cancel is not None:
            self.cancel.checkpoint(what)
