"""Semantic version parsing and tag name normalization."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Optional

from .errors import ParseError

__all__ = ["EPOCH_MARKER", "Version", "normalize_version", "try_parse_version"]

EPOCH_MARKER = "v"

_NUMERIC = r"0|[1-9]\d*"
_IDENTIFIER = r"0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*"
_SEMVER_RE = re.compile(
    rf"(?P<major>{_NUMERIC})\.(?P<minor>{_NUMERIC})\.(?P<patch>{_NUMERIC})"
    rf"(?:-(?P<prerelease>(?:{_IDENTIFIER})(?:\.(?:{_IDENTIFIER}))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?",
    re.ASCII,
)


def normalize_version(raw: str) -> str:
    """Strip a single leading ``v`` from a tag or version string.

    The result is a textual canonicalization only; it does not validate.
    """
    if raw.startswith(EPOCH_MARKER) and not raw[len(EPOCH_MARKER) :].startswith(EPOCH_MARKER):
        return raw[len(EPOCH_MARKER) :]
    return raw


def _prerelease_key(identifiers: tuple[str, ...]) -> tuple[tuple[int, int, str], ...]:
    # Numeric identifiers sort before alphanumeric ones.
    return tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part) for part in identifiers
    )


@total_ordering
@dataclass(frozen=True)
class Version:
    """An immutable semantic version ordered by semver precedence.

    Build metadata is kept for display but ignored by comparisons.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str = field(default="", compare=False)

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse ``MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]``.

        Raises ParseError when the text does not conform.
        """
        match = _SEMVER_RE.fullmatch(text)
        if match is None:
            raise ParseError(f"'{text}' is not a valid semantic version")
        prerelease = match.group("prerelease")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=tuple(prerelease.split(".")) if prerelease else (),
            build=match.group("build") or "",
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def _precedence(self) -> tuple[object, ...]:
        # A version without pre-release sorts after all of its pre-releases.
        if not self.prerelease:
            return (self.major, self.minor, self.patch, 1, ())
        return (self.major, self.minor, self.patch, 0, _prerelease_key(self.prerelease))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence() < other._precedence()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        return text


def try_parse_version(raw: str) -> Optional[Version]:
    """Normalize and parse a tag name, returning None for non-version names."""
    try:
        return Version.parse(normalize_version(raw))
    except ParseError:
        return None
