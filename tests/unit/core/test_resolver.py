"""Unit tests for version resolution."""

from collections.abc import Sequence

import pytest
from kernrepo.core.cancel import CancelToken
from kernrepo.core.errors import InteractiveTimeoutError, SyncCancelled
from kernrepo.core.resolver import PromptOutcome, Prompter, VersionResolver
from kernrepo.models.token import VersionToken


class ScriptedPrompter(Prompter):
    """Prompter answering from a fixed script (None means timeout)."""

    def __init__(self, answers: list[str | None]) -> None:
        self.answers = answers
        self.asked: list[tuple[str, list[str], float]] = []
        self.rejected: list[str] = []

    def ask(
        self,
        family: str,
        candidates: Sequence[VersionToken],
        timeout: float,
    ) -> PromptOutcome:
        self.asked.append((family, [t.version for t in candidates], timeout))
        return PromptOutcome(answer=self.answers.pop(0))

    def reject(self, answer: str, count: int) -> None:
        self.rejected.append(answer)


def tokens(family: str, *versions: str) -> list[VersionToken]:
    return [VersionToken(family, v) for v in versions]


class TestPromptOutcome:
    """Tests for PromptOutcome."""

    def test_timed_out(self) -> None:
        """A missing answer means the prompt timed out."""
        assert PromptOutcome(answer=None).timed_out
        assert not PromptOutcome(answer="1").timed_out


class TestAutomaticResolution:
    """Tests for resolution without user interaction."""

    def test_single_candidate(self) -> None:
        """A single candidate is taken without prompting."""
        prompter = ScriptedPrompter([])
        resolved = VersionResolver(prompter).resolve({"linux": tokens("linux", "6.6.1-1")})

        assert resolved == {"linux": VersionToken("linux", "6.6.1-1")}
        assert prompter.asked == []

    def test_prefer_newest(self) -> None:
        """prefer_newest picks the maximum version."""
        grouped = {"pkg": tokens("pkg", "1.2.3", "1.10.0", "1.9.9")}
        resolved = VersionResolver().resolve(grouped, prefer_newest=True)

        assert resolved["pkg"].version == "1.10.0"

    def test_preferred_wins_over_newest(self) -> None:
        """A still-listed preferred version beats prefer_newest."""
        grouped = {"linux-lts": tokens("linux-lts", "6.1.60-1", "6.1.61-1")}
        preferred = {"linux-lts": VersionToken("linux-lts", "6.1.60-1")}

        resolved = VersionResolver().resolve(grouped, prefer_newest=True, preferred=preferred)

        assert resolved["linux-lts"].version == "6.1.60-1"

    def test_preferred_not_listed_falls_through(self) -> None:
        """A preferred version missing from the candidates is ignored."""
        grouped = {"linux": tokens("linux", "6.6.2-1", "6.6.3-1")}
        preferred = {"linux": VersionToken("linux", "6.6.1-1")}

        resolved = VersionResolver().resolve(grouped, prefer_newest=True, preferred=preferred)

        assert resolved["linux"].version == "6.6.3-1"

    def test_returns_listed_token(self) -> None:
        """The resolved token is the catalog's instance, not the preferred one."""
        listed = VersionToken("linux", "6.6.1-1", raw="linux-6.6.1-1-x86_64")
        grouped = {"linux": [listed, VersionToken("linux", "6.6.2-1")]}

        resolved = VersionResolver().resolve(
            grouped, preferred={"linux": VersionToken("linux", "6.6.1-1")}
        )

        assert resolved["linux"].raw == "linux-6.6.1-1-x86_64"

    def test_empty_groups_skipped(self) -> None:
        """Families without candidates are absent from the result."""
        assert VersionResolver().resolve({"linux": []}) == {}


class TestInteractiveResolution:
    """Tests for the prompt fallback."""

    def test_numbered_choice(self) -> None:
        """The answer selects a 1-based candidate, oldest first."""
        prompter = ScriptedPrompter(["2\n"])
        grouped = {"pkg": tokens("pkg", "1.10.0", "1.2.3", "1.9.9")}

        resolved = VersionResolver(prompter, timeout=5).resolve(grouped)

        assert resolved["pkg"].version == "1.9.9"
        assert prompter.asked == [("pkg", ["1.2.3", "1.9.9", "1.10.0"], 5)]

    def test_invalid_answers_reprompt(self) -> None:
        """Out-of-range and non-numeric answers ask again."""
        prompter = ScriptedPrompter(["abc", "0", "4", "3"])
        grouped = {"pkg": tokens("pkg", "1.0", "2.0", "3.0")}

        resolved = VersionResolver(prompter).resolve(grouped)

        assert resolved["pkg"].version == "3.0"
        assert prompter.rejected == ["abc", "0", "4"]
        assert len(prompter.asked) == 4

    def test_timeout_raises(self) -> None:
        """A prompt without an answer aborts resolution."""
        prompter = ScriptedPrompter([None])
        grouped = {"pkg": tokens("pkg", "1.0", "2.0")}

        with pytest.raises(InteractiveTimeoutError, match="No version of pkg selected"):
            VersionResolver(prompter, timeout=30).resolve(grouped)

    def test_timeout_after_invalid_answer(self) -> None:
        """Every re-prompt is bounded by the timeout as well."""
        prompter = ScriptedPrompter(["x", None])
        grouped = {"pkg": tokens("pkg", "1.0", "2.0")}

        with pytest.raises(InteractiveTimeoutError):
            VersionResolver(prompter).resolve(grouped)

    def test_no_prompter(self) -> None:
        """Ambiguity without a prompter fails like a timeout."""
        with pytest.raises(InteractiveTimeoutError, match="no way to choose"):
            VersionResolver().resolve({"pkg": tokens("pkg", "1.0", "2.0")})


class InterruptedPrompter(Prompter):
    """Prompter whose wait is cut short by an interruption."""

    def __init__(self, cancel: CancelToken) -> None:
        self.cancel = cancel
        self.calls = 0

    def ask(
        self,
        family: str,
        candidates: Sequence[VersionToken],
        timeout: float,
    ) -> PromptOutcome:
        self.calls += 1
        self.cancel.cancel("SIGINT")
        return PromptOutcome(answer=None)


class TestCancellation:
    """Tests for interruptions while choosing a version."""

    def test_interrupt_during_prompt_cancels(self) -> None:
        """An interruption while waiting wins over the timeout."""
        cancel = CancelToken()
        prompter = InterruptedPrompter(cancel)
        grouped = {"pkg": tokens("pkg", "1.0", "2.0")}

        with pytest.raises(SyncCancelled, match="choosing a version of pkg"):
            VersionResolver(prompter, cancel=cancel).resolve(grouped)
        assert prompter.calls == 1

    def test_already_cancelled_skips_prompt(self) -> None:
        """No prompt is shown once cancellation was requested."""
        cancel = CancelToken()
        cancel.cancel("SIGTERM")
        prompter = ScriptedPrompter(["1"])
        grouped = {"pkg": tokens("pkg", "1.0", "2.0")}

        with pytest.raises(SyncCancelled):
            VersionResolver(prompter, cancel=cancel).resolve(grouped)
        assert prompter.asked == []
