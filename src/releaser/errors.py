"""Error kinds raised while resolving a release."""

from __future__ import annotations

__all__ = [
    "ReleaseError",
    "ParseError",
    "InvalidVersionFormat",
    "EmptyCatalog",
    "TagNotFound",
    "MalformedLatestTag",
    "NoPreviousVersion",
    "InconsistentTagOrdering",
]


class ReleaseError(Exception):
    """Base class for failures in release resolution and changelog windowing.

    Every subclass carries a stable ``kind`` identifier so that callers can
    report the failure category alongside the human-readable message.
    """

    kind = "ReleaseError"

    def __str__(self) -> str:
        message = super().__str__()
        return f"{self.kind}: {message}" if message else self.kind


class ParseError(ReleaseError, ValueError):
    """A version string does not conform to the semantic version format."""

    kind = "ParseError"


class InvalidVersionFormat(ParseError):
    """The user-requested release version cannot be parsed."""

    kind = "InvalidVersionFormat"


class EmptyCatalog(ReleaseError):
    """The project has no tags."""

    kind = "EmptyCatalog"


class TagNotFound(ReleaseError):
    """No tag matches the requested version."""

    kind = "TagNotFound"


class MalformedLatestTag(ReleaseError):
    """The newest tag cannot be parsed as a version."""

    kind = "MalformedLatestTag"


class NoPreviousVersion(ReleaseError):
    """No older tag exists in the release's major version line."""

    kind = "NoPreviousVersion"


class InconsistentTagOrdering(ReleaseError):
    """Tag timestamps contradict the version ordering."""

    kind = "InconsistentTagOrdering"
