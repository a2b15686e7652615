"""GitLab REST client implementing the hosting-service operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional, Protocol
from urllib.parse import quote

import httpx

from .changelog import MERGED_STATE, ChangeRequestSummary
from .tags import TagCatalog
from .utils import format_timestamp, log_debug

__all__ = [
    "API_SUFFIX",
    "GitLabClient",
    "HostingService",
    "HostingServiceError",
    "UploadedFile",
    "api_root",
]

API_SUFFIX = "/api/v4"
DEFAULT_TIMEOUT = 30.0
PER_PAGE = 100


class HostingServiceError(RuntimeError):
    """Raised when the hosting service rejects or fails a request."""


@dataclass(frozen=True)
class UploadedFile:
    """A file uploaded to the project."""

    url: str
    alt: str
    full_url: str


class HostingService(Protocol):
    """Operations the release workflow needs from the hosting service."""

    def __enter__(self) -> HostingService: ...

    def __exit__(self, *exc_info: object) -> None: ...

    def list_tags(self) -> TagCatalog: ...

    def list_merged_change_requests(
        self, created_after: datetime, created_before: datetime
    ) -> list[ChangeRequestSummary]: ...

    def upload_file(self, path: Path) -> UploadedFile: ...

    def create_release(self, *, name: str, tag_name: str, description: str) -> str: ...

    def link_release_asset(self, tag_name: str, *, name: str, url: str) -> None: ...


def api_root(base_url: str) -> str:
    """Return the REST API root for a GitLab instance URL."""
    root = base_url.rstrip("/")
    if root.endswith(API_SUFFIX):
        return root
    return root + API_SUFFIX


class GitLabClient:
    """Thin GitLab API v4 client scoped to a single project."""

    def __init__(
        self,
        base_url: str,
        token: str,
        project_id: str,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.project_id = project_id
        headers = {"PRIVATE-TOKEN": token} if token else {}
        self._client = httpx.Client(
            base_url=api_root(base_url),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> GitLabClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def _project_path(self) -> str:
        return f"/projects/{quote(self.project_id, safe='')}"

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        log_debug(f"{method} {path}")
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise HostingServiceError(f"{method} {path} failed: {exc}") from exc
        log_debug(f"{method} {path} -> {response.status_code}")
        if response.is_error:
            raise HostingServiceError(
                f"{method} {path} returned {response.status_code}: {response.text.strip()}"
            )
        return response

    def _paginate(
        self, path: str, params: Mapping[str, Any] | None = None
    ) -> Iterator[Mapping[str, Any]]:
        query: dict[str, Any] = dict(params or {})
        query["per_page"] = PER_PAGE
        page = "1"
        while page:
            query["page"] = page
            response = self._request("GET", path, params=query)
            payload = response.json()
            if not isinstance(payload, list):
                raise HostingServiceError(f"GET {path} returned a non-list payload")
            yield from payload
            page = response.headers.get("X-Next-Page", "").strip()

    def list_tags(self) -> TagCatalog:
        """Fetch all project tags."""
        payloads = list(self._paginate(f"{self._project_path}/repository/tags"))
        log_debug(f"fetched {len(payloads)} tags")
        return TagCatalog.from_payloads(payloads)

    def list_merged_change_requests(
        self, created_after: datetime, created_before: datetime
    ) -> list[ChangeRequestSummary]:
        """Fetch merged merge requests created within the given range."""
        params = {
            "state": MERGED_STATE,
            "created_after": format_timestamp(created_after),
            "created_before": format_timestamp(created_before),
        }
        return [
            ChangeRequestSummary.from_payload(payload)
            for payload in self._paginate(f"{self._project_path}/merge_requests", params)
        ]

    def upload_file(self, path: Path) -> UploadedFile:
        """Upload a file to the project's uploads area."""
        with path.open("rb") as handle:
            response = self._request(
                "POST",
                f"{self._project_path}/uploads",
                files={"file": (path.name, handle, "application/gzip")},
            )
        payload = response.json()
        url = str(payload.get("url") or "")
        return UploadedFile(
            url=url,
            full_url=f"{self.base_url}/{self.project_id}/{url.lstrip('/')}",
            alt=str(payload.get("alt") or path.name),
        )

    def create_release(self, *, name: str, tag_name: str, description: str) -> str:
        """Create a release for an existing tag and return its tag name."""
        response = self._request(
            "POST",
            f"{self._project_path}/releases",
            json={"name": name, "tag_name": tag_name, "description": description},
        )
        payload = response.json()
        return str(payload.get("tag_name") or tag_name)

    def link_release_asset(self, tag_name: str, *, name: str, url: str) -> None:
        """Attach a link asset to a release."""
        self._request(
            "POST",
            f"{self._project_path}/releases/{quote(tag_name, safe='')}/assets/links",
            json={"name": name, "url": url},
        )
