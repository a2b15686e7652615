"""Read-only catalog of repository tags fetched from the hosting service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Iterator, Mapping, Optional

from .errors import EmptyCatalog, TagNotFound
from .utils import coerce_datetime
from .versions import Version, try_parse_version

__all__ = ["Tag", "TagCatalog"]


@dataclass(frozen=True)
class Tag:
    """A repository tag as reported by the hosting service.

    The name is kept verbatim; its version is derived on demand.
    """

    name: str
    committed_at: datetime

    @property
    def version(self) -> Optional[Version]:
        """Return the parsed version, or None for non-version tag names."""
        return try_parse_version(self.name)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Tag:
        """Build a tag from a GitLab tag JSON object."""
        name = str(payload.get("name") or "").strip()
        if not name:
            raise ValueError("Tag payload is missing 'name'.")
        commit = payload.get("commit") or {}
        committed_at = coerce_datetime(commit.get("committed_date"))
        if committed_at is None:
            committed_at = coerce_datetime(commit.get("created_at"))
        if committed_at is None:
            raise ValueError(f"Tag '{name}' has no commit timestamp.")
        return cls(name=name, committed_at=committed_at)


class TagCatalog:
    """Immutable, newest-first sequence of tags.

    Tags are sorted by commit timestamp, newest first, when the catalog is
    built. Ties keep the order in which the hosting service reported them.
    """

    def __init__(self, tags: Iterable[Tag]) -> None:
        self._tags: tuple[Tag, ...] = tuple(
            sorted(tags, key=lambda tag: tag.committed_at, reverse=True)
        )

    @classmethod
    def from_payloads(cls, payloads: Iterable[Mapping[str, Any]]) -> TagCatalog:
        return cls(Tag.from_payload(payload) for payload in payloads)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __bool__(self) -> bool:
        return bool(self._tags)

    def __repr__(self) -> str:
        names = ", ".join(tag.name for tag in self._tags)
        return f"TagCatalog([{names}])"

    def latest(self) -> Tag:
        """Return the newest tag."""
        if not self._tags:
            raise EmptyCatalog("the project has no tags")
        return self._tags[0]

    def find_by_version(self, version: Version) -> Tag:
        """Return the first tag whose normalized name parses to ``version``.

        Tags whose names are not versions are ignored.
        """
        for tag in self._tags:
            if tag.version == version:
                return tag
        raise TagNotFound(f"no tag matches version {version}")
