from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from releaser.changelog import ChangeRequestSummary
from releaser.gitlab import HostingServiceError, UploadedFile
from releaser.tags import Tag, TagCatalog

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def at(seconds: int) -> datetime:
    """Return a timestamp ``seconds`` after a fixed epoch."""
    return EPOCH + timedelta(seconds=seconds)


def make_catalog(*pairs: tuple[str, int]) -> TagCatalog:
    return TagCatalog(Tag(name, at(seconds)) for name, seconds in pairs)


@pytest.fixture
def sample_catalog() -> TagCatalog:
    return make_catalog(("v2.1.0", 100), ("v2.0.0", 50), ("v1.9.0", 10))


class FakeService:
    """In-memory stand-in for the GitLab client."""

    def __init__(
        self,
        catalog: TagCatalog,
        change_requests: list[ChangeRequestSummary] | None = None,
        *,
        fail_on: str | None = None,
    ) -> None:
        self.catalog = catalog
        self.change_requests = change_requests or []
        self.fail_on = fail_on
        self.windows: list[tuple[datetime, datetime]] = []
        self.uploads: list[Path] = []
        self.releases: list[dict[str, str]] = []
        self.links: list[dict[str, str]] = []
        self.closed = False

    def __enter__(self) -> FakeService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.closed = True

    def _maybe_fail(self, operation: str) -> None:
        if self.fail_on == operation:
            raise HostingServiceError(f"{operation} returned 500: boom")

    def list_tags(self) -> TagCatalog:
        self._maybe_fail("tags")
        return self.catalog

    def list_merged_change_requests(
        self, created_after: datetime, created_before: datetime
    ) -> list[ChangeRequestSummary]:
        self._maybe_fail("merge_requests")
        self.windows.append((created_after, created_before))
        return self.change_requests

    def upload_file(self, path: Path) -> UploadedFile:
        self._maybe_fail("upload")
        self.uploads.append(path)
        return UploadedFile(
            url=f"/uploads/abc/{path.name}",
            alt=path.name,
            full_url=f"https://gitlab.example.com/group/project/uploads/abc/{path.name}",
        )

    def create_release(self, *, name: str, tag_name: str, description: str) -> str:
        self._maybe_fail("release")
        self.releases.append({"name": name, "tag_name": tag_name, "description": description})
        return tag_name

    def link_release_asset(self, tag_name: str, *, name: str, url: str) -> None:
        self._maybe_fail("link")
        self.links.append({"tag_name": tag_name, "name": name, "url": url})
