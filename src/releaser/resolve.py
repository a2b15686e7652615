"""Selection of the release tag and of the tag it is compared against."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import InvalidVersionFormat, MalformedLatestTag, NoPreviousVersion, ParseError
from .tags import Tag, TagCatalog
from .utils import log_debug
from .versions import Version, normalize_version

__all__ = ["ResolvedTag", "resolve_release", "resolve_previous"]


@dataclass(frozen=True)
class ResolvedTag:
    """A tag paired with the version parsed from its name."""

    version: Version
    tag: Tag


def resolve_release(catalog: TagCatalog, requested: Optional[str] = None) -> ResolvedTag:
    """Return the tag being released.

    Without a requested version the newest tag is released. Otherwise the
    request is normalized, parsed, and matched against the catalog.
    """
    requested_value = (requested or "").strip()
    if not requested_value:
        latest = catalog.latest()
        try:
            version = Version.parse(normalize_version(latest.name))
        except ParseError as exc:
            raise MalformedLatestTag(
                f"latest tag '{latest.name}' is not a semantic version"
            ) from exc
        log_debug(f"no version requested, releasing latest tag {latest.name}")
        return ResolvedTag(version=version, tag=latest)

    try:
        target = Version.parse(normalize_version(requested_value))
    except ParseError as exc:
        raise InvalidVersionFormat(
            f"requested version '{requested_value}' is not a semantic version"
        ) from exc
    tag = catalog.find_by_version(target)
    log_debug(f"requested version {requested_value} matched tag {tag.name}")
    return ResolvedTag(version=target, tag=tag)


def resolve_previous(catalog: TagCatalog, release: Version) -> ResolvedTag:
    """Return the nearest older tag within the release's major version line.

    The first tag in catalog order that parses, is strictly older than
    ``release``, and shares its major component wins.
    """
    for tag in catalog:
        version = tag.version
        if version is None:
            continue
        if version >= release:
            continue
        if version.major != release.major:
            continue
        log_debug(f"previous version of {release} is {version} (tag {tag.name})")
        return ResolvedTag(version=version, tag=tag)
    raise NoPreviousVersion(f"no tag older than {release} in major version {release.major}")
