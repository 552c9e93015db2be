"""Version token model for kernel packages.

A token is the parsed form of a ``<family>-<version>[-<arch>]`` entry, as it
appears in the remote repository database listing or in the local state
record. Tokens compare by ``(family, version)`` using pacman's version
ordering.

Examples:
    linux-lts-6.6.1-1          -> family "linux-lts", version "6.6.1-1"
    linux-6.6.1.arch1-1-x86_64 -> family "linux", version "6.6.1.arch1-1"
    zfs-2.2.0                  -> family "zfs", version "2.2.0"
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from functools import total_ordering

from kernrepo.core.errors import TokenParseError

logger = logging.getLogger(__name__)

# Architectures accepted as a trailing token suffix
ARCHITECTURES = ("x86_64", "aarch64", "i686", "armv7h", "any")

_TOKEN_RE = re.compile(
    r"^(?P<family>[A-Za-z0-9@_+][A-Za-z0-9@._+-]*?)"
    r"-(?P<version>(?:\d+:)?\d[^\s:/-]*(?:-\d+(?:\.\d+)?)?)"
    r"(?:-(?P<arch>" + "|".join(ARCHITECTURES) + r"))?$"
)

# Optional separator run followed by one numeric or alphabetic segment
_SEGMENT_RE = re.compile(r"([^A-Za-z0-9]*)(?:(\d+)|([A-Za-z]+))")
_LEADING_SEPARATORS_RE = re.compile(r"^[^A-Za-z0-9]+")


def _cmp(a: object, b: object) -> int:
    return (a > b) - (a < b)  # type: ignore[operator]


def _is_alpha(char: str) -> bool:
    return char.isascii() and char.isalpha()


def _rpmvercmp(a: str, b: str) -> int:
    """Compare two pkgver strings segment by segment.

    Numeric segments compare as integers and always sort after alphabetic
    ones. Between two segments, a longer run of separators is newer. When one
    side runs out of segments, what is left of the other decides: a bare
    alphabetic segment marks a pre-release (older), while a numeric segment
    or a separator marks a newer release, so ``1.0a < 1.0 < 1.0.a``.
    """
    if a == b:
        return 0

    end_a = end_b = 0
    for seg_a, seg_b in zip(_SEGMENT_RE.finditer(a), _SEGMENT_RE.finditer(b)):
        sep_a, num_a, alpha_a = seg_a.groups()
        sep_b, num_b, alpha_b = seg_b.groups()
        if len(sep_a) != len(sep_b):
            return _cmp(len(sep_a), len(sep_b))

        if num_a and num_b:
            result = _cmp(int(num_a), int(num_b))
        elif alpha_a and alpha_b:
            result = _cmp(alpha_a, alpha_b)
        else:
            return 1 if num_a else -1
        if result:
            return result
        end_a, end_b = seg_a.end(), seg_b.end()

    rest_a, rest_b = a[end_a:], b[end_b:]
    if rest_a and rest_b:
        # Trailing separators on both sides cancel out
        rest_a = _LEADING_SEPARATORS_RE.sub("", rest_a)
        rest_b = _LEADING_SEPARATORS_RE.sub("", rest_b)

    if not rest_a and not rest_b:
        return 0
    if (not rest_a and not _is_alpha(rest_b[0])) or (rest_a and _is_alpha(rest_a[0])):
        return -1
    return 1


def _split_version(version: str) -> tuple[int, str, str | None]:
    """Split ``[epoch:]pkgver[-pkgrel]`` into its parts."""
    epoch = 0
    if ":" in version:
        epoch_part, version = version.split(":", 1)
        epoch = int(epoch_part) if epoch_part.isdigit() else 0
    pkgver, sep, pkgrel = version.partition("-")
    return epoch, pkgver, pkgrel if sep else None


def vercmp(a: str, b: str) -> int:
    """Compare two full version strings the way pacman does.

    Args:
        a: First version (``[epoch:]pkgver[-pkgrel]``).
        b: Second version.

    Returns:
        Negative if a is older, zero if equivalent, positive if a is newer.
    """
    epoch_a, ver_a, rel_a = _split_version(a)
    epoch_b, ver_b, rel_b = _split_version(b)

    if epoch_a != epoch_b:
        return _cmp(epoch_a, epoch_b)

    result = _rpmvercmp(ver_a, ver_b)
    if result or rel_a is None or rel_b is None:
        return result
    return _rpmvercmp(rel_a, rel_b)


@dataclass(frozen=True, slots=True)
class ArtifactLayout:
    """On-disk naming convention for the artifacts of one token.

    Attributes:
        arch: Architecture used when the token carries none.
        extension: Package file extension.
        subpackages: Sub-package labels appended to the family name.
            The empty label is the base package.
        signatures: Whether a detached signature accompanies each package.
        signature_suffix: Suffix of the detached signature file.
    """

    arch: str = "x86_64"
    extension: str = ".pkg.tar.zst"
    subpackages: tuple[str, ...] = ("", "-headers")
    signatures: bool = True
    signature_suffix: str = ".sig"

    def is_signature(self, file_name: str) -> bool:
        """Check whether a file name denotes a detached signature."""
        return file_name.endswith(self.signature_suffix)


@dataclass(frozen=True, slots=True)
class ArtifactFiles:
    """Concrete file names of one sub-package.

    Attributes:
        package_name: Package name as registered in the database.
        package: Package file name.
        signature: Detached signature file name, if signatures are enabled.
    """

    package_name: str
    package: str
    signature: str | None = None

    @property
    def files(self) -> tuple[str, ...]:
        """All file names, package first."""
        if self.signature is None:
            return (self.package,)
        return (self.package, self.signature)


@total_ordering
@dataclass(frozen=True, slots=True)
class VersionToken:
    """A parsed, comparable package family and version.

    Equality, hashing and ordering only consider ``family`` and ``version``;
    ``raw`` and ``arch`` are carried along for display and file naming.

    Attributes:
        family: Package name without version or architecture.
        version: Full version string (``[epoch:]pkgver[-pkgrel]``).
        raw: Original text the token was parsed from.
        arch: Architecture suffix, if the text carried one.
    """

    family: str
    version: str
    raw: str = field(default="", compare=False)
    arch: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Validate token data after initialization."""
        if not self.family:
            msg = "Family cannot be empty"
            raise ValueError(msg)
        if not self.version:
            msg = "Version cannot be empty"
            raise ValueError(msg)
        if not self.raw:
            object.__setattr__(self, "raw", f"{self.family}-{self.version}")

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, VersionToken):
            return NotImplemented
        if self.family != other.family:
            return self.family < other.family
        result = vercmp(self.version, other.version)
        if result:
            return result < 0
        # Equivalent but differently spelled versions still need a total order
        return self.version < other.version

    def __str__(self) -> str:
        return self.raw

    def artifact_names(self, layout: ArtifactLayout) -> dict[str, ArtifactFiles]:
        """Map each sub-package label to its concrete file names.

        Args:
            layout: Naming convention of the repository.

        Returns:
            Dictionary keyed by sub-package label ("" for the base package).
        """
        arch = self.arch or layout.arch
        artifacts: dict[str, ArtifactFiles] = {}
        for label in layout.subpackages:
            package_name = f"{self.family}{label}"
            package = f"{package_name}-{self.version}-{arch}{layout.extension}"
            signature = f"{package}{layout.signature_suffix}" if layout.signatures else None
            artifacts[label] = ArtifactFiles(
                package_name=package_name,
                package=package,
                signature=signature,
            )
        return artifacts

    def file_names(self, layout: ArtifactLayout) -> list[str]:
        """Flat list of every file belonging to this token, in download order."""
        return [name for files in self.artifact_names(layout).values() for name in files.files]


def parse_token(text: str) -> VersionToken:
    """Parse a single ``<family>-<version>[-<arch>]`` string.

    Args:
        text: Token text without surrounding whitespace.

    Returns:
        Parsed VersionToken.

    Raises:
        TokenParseError: If the text does not decompose into family and version.
    """
    match = _TOKEN_RE.match(text)
    if match is None:
        raise TokenParseError(f"Malformed package entry: {text!r}")
    return VersionToken(
        family=match.group("family"),
        version=match.group("version"),
        raw=text,
        arch=match.group("arch"),
    )


def _sorted_unique(tokens: Iterable[VersionToken]) -> list[VersionToken]:
    by_raw = {token.raw: token for token in tokens}
    return sorted(by_raw.values(), key=lambda t: (t, t.raw))


def parse_tokens(text: str, families: Iterable[str]) -> list[VersionToken]:
    """Parse the entries of a listing that belong to the given families.

    A word matches a family when it starts with ``<family>-`` followed by a
    digit. A matching word that does not parse back to exactly that family is
    a malformed catalog entry and aborts parsing.

    Args:
        text: Whitespace-delimited listing.
        families: Family names to keep.

    Returns:
        Matching tokens, deduplicated by raw text and sorted.

    Raises:
        TokenParseError: If a matching entry is malformed.
    """
    filters = [(family, re.compile(rf"^{re.escape(family)}-\d")) for family in families]
    tokens: list[VersionToken] = []

    for word in text.split():
        for family, pattern in filters:
            if not pattern.match(word):
                continue
            token = parse_token(word)
            if token.family != family:
                raise TokenParseError(
                    f"Malformed package entry: {word!r} does not belong to {family!r}"
                )
            tokens.append(token)

    return _sorted_unique(tokens)


def parse_tokens_lenient(text: str) -> list[VersionToken]:
    """Parse every word of a listing, dropping malformed entries.

    Used for the locally written state record, which can always be
    rebuilt by the next sync.

    Args:
        text: Whitespace-delimited listing.

    Returns:
        Parsed tokens, deduplicated by raw text and sorted.
    """
    tokens: list[VersionToken] = []
    for word in text.split():
        try:
            tokens.append(parse_token(word))
        except TokenParseError as e:
            logger.warning("Skipping malformed state entry: %s", e)
    return _sorted_unique(tokens)


def group_by_family(tokens: Iterable[VersionToken]) -> dict[str, list[VersionToken]]:
    """Group tokens by family, each group sorted oldest first."""
    grouped: dict[str, list[VersionToken]] = {}
    for token in tokens:
        grouped.setdefault(token.family, []).append(token)
    for candidates in grouped.values():
        candidates.sort()
    return grouped
