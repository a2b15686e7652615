"""Tests for the Python facade."""

from __future__ import annotations

from pathlib import Path

import pytest

from releaser import Releaser
from releaser.config import Config, GitLabConfig, save_config

from conftest import FakeService, make_catalog


def _bootstrap(tmp_path: Path) -> Path:
    (tmp_path / "payload.txt").write_text("data", encoding="utf-8")
    config_path = tmp_path / "config.yml"
    save_config(
        Config(
            project_id="42",
            gitlab=GitLabConfig(url="https://gitlab.example.com"),
            files=["payload.txt"],
        ),
        config_path,
    )
    return config_path


@pytest.fixture
def service(monkeypatch: pytest.MonkeyPatch) -> FakeService:
    fake = FakeService(make_catalog(("v1.1.0", 20), ("v1.0.0", 10)))
    monkeypatch.setattr("releaser.cli._core.GitLabClient", lambda *args, **kwargs: fake)
    return fake


def test_changelog_does_not_publish(
    tmp_path: Path, service: FakeService, capsys: pytest.CaptureFixture[str]
) -> None:
    client = Releaser(config=_bootstrap(tmp_path))

    text = client.changelog()

    assert text == "### Release notes for 1.1.0\n"
    assert service.releases == []
    assert "Release notes" not in capsys.readouterr().out


def test_release_returns_outcome(tmp_path: Path, service: FakeService) -> None:
    client = Releaser(config=_bootstrap(tmp_path))

    outcome = client.release(version="1.1.0", output_dir=tmp_path / "dist")

    assert outcome.release.tag.name == "v1.1.0"
    assert outcome.previous.tag.name == "v1.0.0"
    assert outcome.tag_name == "v1.1.0"
    assert outcome.archive_path == tmp_path / "dist" / "1.1.0.tar.gz"
    assert outcome.archive_path.exists()
    assert service.uploads == [outcome.archive_path]
