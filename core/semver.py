"""Cargo-style version requirements matched against semantic versions.

Implements the requirement grammar used by Cargo manifests: comma-separated
comparators such as ``^1.2``, ``=0.4.0-beta.1`` or ``>=1.0, <2.0``, where a
comparator without an operator is a caret requirement. Concrete versions and
their precedence come from ``semantic_version``.
"""

import string
from dataclasses import dataclass
from enum import Enum

from semantic_version import Version

from .exceptions import SemverError

MAX_COMPARATORS = 32
U64_MAX = 2**64 - 1
WILDCARDS = ("*", "x", "X")
DIGITS = string.digits
IDENTIFIER_CHARS = string.ascii_letters + "-"


class Position(Enum):
    """Component of a version being parsed, used in error messages."""

    MAJOR = "major version number"
    MINOR = "minor version number"
    PATCH = "patch version number"
    PRE = "pre-release identifier"
    BUILD = "build metadata"

    def __str__(self) -> str:
        return self.value


class Op(Enum):
    """Comparator operator; the value is its textual symbol."""

    EXACT = "="
    GREATER = ">"
    GREATER_EQ = ">="
    LESS = "<"
    LESS_EQ = "<="
    TILDE = "~"
    CARET = "^"
    WILDCARD = ""

    @property
    def label(self) -> str:
        """CamelCase operator name, e.g. ``GreaterEq``."""
        return self.name.title().replace("_", "")


# Two-character operators must be tried first.
_OP_SYMBOLS = [
    (">=", Op.GREATER_EQ),
    ("<=", Op.LESS_EQ),
    ("=", Op.EXACT),
    (">", Op.GREATER),
    ("<", Op.LESS),
    ("~", Op.TILDE),
    ("^", Op.CARET),
]


@dataclass(frozen=True)
class Comparator:
    """A single operator applied to a possibly partial version."""

    op: Op
    major: int
    minor: int | None = None
    patch: int | None = None
    pre: tuple[str, ...] = ()  # pre-release identifiers, e.g. ("beta", "1")

    def __str__(self) -> str:
        text = f"{self.op.value}{self.major}"
        if self.minor is not None:
            text += f".{self.minor}"
            if self.patch is not None:
                text += f".{self.patch}"
                if self.pre:
                    text += "-" + ".".join(self.pre)
            elif self.op is Op.WILDCARD:
                text += ".*"
        elif self.op is Op.WILDCARD:
            text += ".*"
        return text

    def matches(self, version: Version) -> bool:
        """Check the comparator alone, ignoring pre-release opt-in rules."""
        if self.op in (Op.EXACT, Op.WILDCARD):
            return self._matches_exact(version)
        if self.op is Op.GREATER:
            return self._matches_greater(version)
        if self.op is Op.GREATER_EQ:
            return self._matches_exact(version) or self._matches_greater(version)
        if self.op is Op.LESS:
            return self._matches_less(version)
        if self.op is Op.LESS_EQ:
            return self._matches_exact(version) or self._matches_less(version)
        if self.op is Op.TILDE:
            return self._matches_tilde(version)
        return self._matches_caret(version)

    def allows_prerelease_of(self, version: Version) -> bool:
        """A pre-release only matches comparators naming the same x.y.z with a pre-release."""
        return (
            self.major == version.major
            and self.minor == version.minor
            and self.patch == version.patch
            and bool(self.pre)
        )

    def _same_release(self, version: Version) -> Version:
        """``version``'s major.minor.patch carrying this comparator's pre-release.

        Only consulted once major, minor and patch are known to be equal, so
        comparing against it orders the pre-releases alone.
        """
        return Version(
            major=version.major, minor=version.minor, patch=version.patch, prerelease=self.pre
        )

    def _matches_exact(self, version: Version) -> bool:
        if version.major != self.major:
            return False
        if self.minor is not None and version.minor != self.minor:
            return False
        if self.patch is not None and version.patch != self.patch:
            return False
        return version.prerelease == self.pre

    def _matches_greater(self, version: Version) -> bool:
        if version.major != self.major:
            return version.major > self.major
        if self.minor is None:
            return False
        if version.minor != self.minor:
            return version.minor > self.minor
        if self.patch is None:
            return False
        if version.patch != self.patch:
            return version.patch > self.patch
        return version > self._same_release(version)

    def _matches_less(self, version: Version) -> bool:
        if version.major != self.major:
            return version.major < self.major
        if self.minor is None:
            return False
        if version.minor != self.minor:
            return version.minor < self.minor
        if self.patch is None:
            return False
        if version.patch != self.patch:
            return version.patch < self.patch
        return version < self._same_release(version)

    def _matches_tilde(self, version: Version) -> bool:
        if version.major != self.major:
            return False
        if self.minor is not None and version.minor != self.minor:
            return False
        if self.patch is not None and version.patch != self.patch:
            return version.patch > self.patch
        return version >= self._same_release(version)

    def _matches_caret(self, version: Version) -> bool:
        if version.major != self.major:
            return False
        if self.minor is None:
            return True
        if self.patch is None:
            if self.major > 0:
                return version.minor >= self.minor
            return version.minor == self.minor

        if self.major > 0:
            if version.minor != self.minor:
                return version.minor > self.minor
            if version.patch != self.patch:
                return version.patch > self.patch
        elif self.minor > 0:
            if version.minor != self.minor:
                return False
            if version.patch != self.patch:
                return version.patch > self.patch
        elif version.minor != self.minor or version.patch != self.patch:
            return False

        return version >= self._same_release(version)


@dataclass(frozen=True)
class VersionReq:
    """A conjunction of comparators; no comparators means ``*``."""

    comparators: tuple[Comparator, ...] = ()

    def __str__(self) -> str:
        if not self.comparators:
            return "*"
        return ", ".join(str(comparator) for comparator in self.comparators)

    def matches(self, version: Version) -> bool:
        """Check whether ``version`` satisfies every comparator."""
        if not all(comparator.matches(version) for comparator in self.comparators):
            return False
        if not version.prerelease:
            return True
        return any(comparator.allows_prerelease_of(version) for comparator in self.comparators)

    @classmethod
    def parse(cls, text: str) -> "VersionReq":
        """Parse a requirement string such as ``"^1.2, <1.5"``."""
        text = text.lstrip(" ")
        after_wildcard = _wildcard(text)
        if after_wildcard is not None:
            rest = after_wildcard.lstrip(" ")
            if not rest:
                return cls()
            if rest.startswith(","):
                raise SemverError(_wildcard_not_alone(text[0]))
            raise SemverError("unexpected character after wildcard in version req")

        comparators: list[Comparator] = []
        while True:
            try:
                comparator, position, rest = _comparator(text)
            except SemverError as error:
                after_wildcard = _wildcard(text)
                if after_wildcard is not None:
                    rest = after_wildcard.lstrip(" ")
                    if not rest or rest.startswith(","):
                        raise SemverError(_wildcard_not_alone(text[0])) from error
                raise

            if len(comparators) == MAX_COMPARATORS:
                raise SemverError("excessive number of version comparators")
            comparators.append(comparator)

            if not rest:
                return cls(tuple(comparators))
            if not rest.startswith(","):
                raise SemverError(f"expected comma after {position}, found {rest[0]!r}")
            text = rest[1:].lstrip(" ")


def _wildcard_not_alone(char: str) -> str:
    return f"wildcard req ({char}) must be the only comparator in the version req"


def _wildcard(text: str) -> str | None:
    """Return the text after a leading wildcard, or None if there is none."""
    if text[:1] in WILDCARDS and text:
        return text[1:]
    return None


def _numeric_identifier(text: str, position: Position) -> tuple[int, str]:
    value = 0
    length = 0
    while length < len(text) and text[length] in DIGITS:
        if value == 0 and length > 0:
            raise SemverError(f"invalid leading zero in {position}")
        value = value * 10 + int(text[length])
        if value > U64_MAX:
            raise SemverError(f"value of {position} exceeds u64::MAX")
        length += 1

    if length:
        return value, text[length:]
    if text:
        raise SemverError(f"unexpected character {text[0]!r} while parsing {position}")
    raise SemverError(f"unexpected end of input while parsing {position}")


def _identifier(text: str, position: Position) -> tuple[str, str]:
    """Split off a dot-separated pre-release or build identifier."""
    accumulated = 0
    segment = 0
    segment_has_nondigit = False
    while True:
        index = accumulated + segment
        char = text[index] if index < len(text) else None
        if char is not None and char in IDENTIFIER_CHARS:
            segment += 1
            segment_has_nondigit = True
        elif char is not None and char in DIGITS:
            segment += 1
        else:
            if segment == 0:
                if accumulated == 0 and char != ".":
                    return "", text
                raise SemverError(f"empty identifier segment in {position}")
            if (
                position is Position.PRE
                and segment > 1
                and not segment_has_nondigit
                and text[accumulated] == "0"
            ):
                raise SemverError(f"invalid leading zero in {position}")
            accumulated += segment
            if char != ".":
                return text[:accumulated], text[accumulated:]
            accumulated += 1
            segment = 0
            segment_has_nondigit = False


def _operator(text: str) -> tuple[Op, str]:
    for symbol, op in _OP_SYMBOLS:
        if text.startswith(symbol):
            return op, text[len(symbol):]
    return Op.CARET, text


def _comparator(text: str) -> tuple[Comparator, Position, str]:
    op, rest = _operator(text)
    default_op = len(rest) == len(text)
    rest = rest.lstrip(" ")

    position = Position.MAJOR
    major, rest = _numeric_identifier(rest, position)

    minor = None
    has_wildcard = False
    if rest.startswith("."):
        position = Position.MINOR
        after_wildcard = _wildcard(rest[1:])
        if after_wildcard is not None:
            has_wildcard = True
            if default_op:
                op = Op.WILDCARD
            rest = after_wildcard
        else:
            minor, rest = _numeric_identifier(rest[1:], position)

    patch = None
    if rest.startswith("."):
        position = Position.PATCH
        after_wildcard = _wildcard(rest[1:])
        if after_wildcard is not None:
            if default_op:
                op = Op.WILDCARD
            rest = after_wildcard
        elif has_wildcard:
            raise SemverError("unexpected character after wildcard in version req")
        else:
            patch, rest = _numeric_identifier(rest[1:], position)

    pre: tuple[str, ...] = ()
    if patch is not None and rest.startswith("-"):
        position = Position.PRE
        identifier, rest = _identifier(rest[1:], position)
        if not identifier:
            raise SemverError(f"empty identifier segment in {position}")
        pre = tuple(identifier.split("."))

    # Build metadata is accepted but carries no meaning in a requirement
    if patch is not None and rest.startswith("+"):
        position = Position.BUILD
        identifier, rest = _identifier(rest[1:], position)
        if not identifier:
            raise SemverError(f"empty identifier segment in {position}")

    comparator = Comparator(op=op, major=major, minor=minor, patch=patch, pre=pre)
    return comparator, position, rest.lstrip(" ")
