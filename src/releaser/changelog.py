"""Changelog windowing and rendering for a release."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Mapping, Sequence

from .errors import InconsistentTagOrdering
from .resolve import ResolvedTag
from .versions import Version

__all__ = [
    "DEFAULT_MARGIN",
    "MERGED_STATE",
    "ChangeRequestSummary",
    "ChangelogWindow",
    "build_window",
    "render_changelog",
]

DEFAULT_MARGIN = timedelta(seconds=1)
MERGED_STATE = "merged"
CHANGE_REQUESTS_HEADING = "#### Merged Merge Requests"


@dataclass(frozen=True)
class ChangeRequestSummary:
    """A merged change request as listed in the changelog."""

    title: str
    id: int
    web_url: str
    author_name: str
    author_url: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ChangeRequestSummary:
        """Build a summary from a GitLab merge request JSON object."""
        author = payload.get("author") or {}
        identifier = payload.get("id")
        return cls(
            title=str(payload.get("title") or "").strip(),
            id=int(identifier) if identifier is not None else 0,
            web_url=str(payload.get("web_url") or ""),
            author_name=str(author.get("username") or author.get("name") or ""),
            author_url=str(author.get("web_url") or ""),
        )

    def to_markdown(self) -> str:
        return (
            f"- {self.title} [#{self.id}]({self.web_url}) "
            f"([{self.author_name}]({self.author_url}))"
        )


@dataclass(frozen=True)
class ChangelogWindow:
    """Exclusive time range selecting the change requests of a release."""

    start: datetime
    end: datetime
    previous: ResolvedTag
    release: ResolvedTag
    state: str = MERGED_STATE

    @property
    def previous_version(self) -> Version:
        return self.previous.version

    @property
    def release_version(self) -> Version:
        return self.release.version


def build_window(
    previous: ResolvedTag,
    release: ResolvedTag,
    *,
    margin: timedelta = DEFAULT_MARGIN,
) -> ChangelogWindow:
    """Derive the query window between two resolved tags.

    Both commit timestamps are widened by ``margin`` so that they fall inside
    an exclusive range query.
    """
    previous_at = previous.tag.committed_at
    release_at = release.tag.committed_at
    if previous_at >= release_at:
        raise InconsistentTagOrdering(
            f"tag {previous.tag.name} ({previous_at.isoformat()}) is not older than "
            f"tag {release.tag.name} ({release_at.isoformat()})"
        )
    start = previous_at - margin
    end = release_at + margin
    if start >= end:
        raise InconsistentTagOrdering(
            f"empty changelog window between {start.isoformat()} and {end.isoformat()}"
        )
    return ChangelogWindow(start=start, end=end, previous=previous, release=release)


def render_changelog(
    version: Version,
    change_requests: Sequence[ChangeRequestSummary],
) -> str:
    """Render the release notes text.

    Change requests are listed in the order given. The header is emitted
    even when there are none.
    """
    lines = [f"### Release notes for {version}"]
    if change_requests:
        lines.append(CHANGE_REQUESTS_HEADING)
        lines.extend(item.to_markdown() for item in change_requests)
    return "\n".join(lines) + "\n"
