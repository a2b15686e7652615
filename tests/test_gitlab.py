"""Tests for the GitLab client using a mocked HTTP transport."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import httpx
import pytest

from releaser.gitlab import GitLabClient, HostingServiceError, api_root

Handler = Callable[[httpx.Request], httpx.Response]


def make_client(handler: Handler, project_id: str = "group/project") -> GitLabClient:
    return GitLabClient(
        "https://gitlab.example.com/",
        "secret",
        project_id,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.parametrize(
    ("base_url", "expected"),
    [
        ("https://gitlab.com", "https://gitlab.com/api/v4"),
        ("https://gitlab.com/", "https://gitlab.com/api/v4"),
        ("https://gitlab.com/api/v4", "https://gitlab.com/api/v4"),
        ("https://gitlab.com/api/v4/", "https://gitlab.com/api/v4"),
    ],
)
def test_api_root(base_url: str, expected: str) -> None:
    assert api_root(base_url) == expected


def test_list_tags_follows_pagination_and_sorts() -> None:
    pages = {
        "1": [
            {"name": "v1.0.0", "commit": {"committed_date": "2024-01-01T00:00:00Z"}},
        ],
        "2": [
            {"name": "v1.1.0", "commit": {"committed_date": "2024-02-01T00:00:00Z"}},
        ],
    }
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        page = request.url.params["page"]
        headers = {"X-Next-Page": "2"} if page == "1" else {"X-Next-Page": ""}
        return httpx.Response(200, json=pages[page], headers=headers)

    with make_client(handler) as client:
        catalog = client.list_tags()

    assert [tag.name for tag in catalog] == ["v1.1.0", "v1.0.0"]
    assert len(seen) == 2
    assert seen[0].headers["PRIVATE-TOKEN"] == "secret"
    assert seen[0].url.raw_path.startswith(b"/api/v4/projects/group%2Fproject/repository/tags")


def test_list_merged_change_requests_sends_window() -> None:
    captured: dict[str, httpx.Request] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(
            200,
            json=[
                {
                    "id": 500,
                    "iid": 5,
                    "title": "Fix X",
                    "web_url": "https://gitlab.example.com/group/project/-/merge_requests/5",
                    "author": {"username": "jdoe", "web_url": "https://gitlab.example.com/jdoe"},
                }
            ],
        )

    start = datetime(2024, 1, 1, 0, 0, 49, tzinfo=timezone.utc)
    end = datetime(2024, 1, 1, 0, 1, 41, tzinfo=timezone.utc)
    with make_client(handler) as client:
        requests = client.list_merged_change_requests(start, end)

    params = captured["request"].url.params
    assert params["state"] == "merged"
    assert params["created_after"] == "2024-01-01T00:00:49Z"
    assert params["created_before"] == "2024-01-01T00:01:41Z"
    assert [item.title for item in requests] == ["Fix X"]
    assert requests[0].id == 500


def test_upload_create_and_link(tmp_path: Path) -> None:
    archive = tmp_path / "1.0.0.tar.gz"
    archive.write_bytes(b"payload")
    calls: list[tuple[str, bytes, bytes]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.method, request.url.raw_path, request.content))
        if request.url.path.endswith("/uploads"):
            return httpx.Response(
                201,
                json={
                    "alt": "1.0.0.tar.gz",
                    "url": "/uploads/abc123/1.0.0.tar.gz",
                    "markdown": "[1.0.0.tar.gz](/uploads/abc123/1.0.0.tar.gz)",
                },
            )
        if request.url.path.endswith("/releases"):
            return httpx.Response(201, json={"tag_name": "v1.0.0"})
        return httpx.Response(201, json={"id": 1})

    with make_client(handler) as client:
        uploaded = client.upload_file(archive)
        tag_name = client.create_release(name="1.0.0", tag_name="v1.0.0", description="notes")
        client.link_release_asset(tag_name, name=uploaded.alt, url=uploaded.full_url)

    assert uploaded.alt == "1.0.0.tar.gz"
    assert uploaded.full_url == (
        "https://gitlab.example.com/group/project/uploads/abc123/1.0.0.tar.gz"
    )
    assert tag_name == "v1.0.0"
    methods = [method for method, _, _ in calls]
    assert methods == ["POST", "POST", "POST"]
    assert json.loads(calls[1][2]) == {
        "name": "1.0.0",
        "tag_name": "v1.0.0",
        "description": "notes",
    }
    assert calls[2][1] == b"/api/v4/projects/group%2Fproject/releases/v1.0.0/assets/links"
    assert json.loads(calls[2][2]) == {"name": "1.0.0.tar.gz", "url": uploaded.full_url}


def test_error_status_raises_hosting_service_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "401 Unauthorized"})

    with make_client(handler) as client:
        with pytest.raises(HostingServiceError, match="401"):
            client.list_tags()


def test_transport_error_raises_hosting_service_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with make_client(handler) as client:
        with pytest.raises(HostingServiceError, match="connection refused"):
            client.list_tags()
