"""Configuration helpers for releaser."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

DEFAULT_CONFIG_FILENAME = "config.yml"
TOKEN_ENV_VAR = "RELEASER_GITLAB_TOKEN"


def default_config_path(directory: Path) -> Path:
    """Return the default config path for a working directory."""
    return directory / DEFAULT_CONFIG_FILENAME


@dataclass
class GitLabConfig:
    """Connection settings for the GitLab instance."""

    url: str
    token: str = ""


@dataclass
class Config:
    """Structured representation of the releaser config."""

    project_id: str
    gitlab: GitLabConfig
    files: list[str] = field(default_factory=list)


def _parse_files(raw: object) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        value = raw.strip()
        return [value] if value else []
    if not isinstance(raw, list):
        raise ValueError("Config option 'files' must be a list of paths.")
    files: list[str] = []
    for item in raw:
        value = str(item).strip()
        if value and value not in files:
            files.append(value)
    return files


def parse_config(raw: object, *, env: Mapping[str, str] | None = None) -> Config:
    """Validate a decoded YAML document and apply environment overrides."""
    if raw is None:
        raw = {}
    if not isinstance(raw, MutableMapping):
        raise ValueError("Config root must be a mapping")

    project_raw = raw.get("project_id", raw.get("project"))
    project_id = str(project_raw).strip() if project_raw is not None else ""
    if not project_id:
        raise ValueError("Config missing 'project_id'")

    gitlab_raw = raw.get("gitlab")
    if gitlab_raw is None:
        gitlab_raw = {}
    if not isinstance(gitlab_raw, MutableMapping):
        raise ValueError("Config option 'gitlab' must be a mapping.")
    url = str(gitlab_raw.get("url") or "").strip()
    if not url:
        raise ValueError("Config missing 'gitlab.url'")
    token = str(gitlab_raw.get("token") or "").strip()

    env_mapping = env if env is not None else os.environ
    env_token = env_mapping.get(TOKEN_ENV_VAR, "").strip()
    if env_token:
        token = env_token

    return Config(
        project_id=project_id,
        gitlab=GitLabConfig(url=url, token=token),
        files=_parse_files(raw.get("files")),
    )


def load_config(path: Path, *, env: Mapping[str, str] | None = None) -> Config:
    """Load the configuration from disk."""
    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle)
    return parse_config(raw, env=env)


def dump_config(config: Config) -> dict[str, Any]:
    """Convert a Config into a plain dictionary suitable for YAML output."""
    gitlab: dict[str, Any] = {"url": config.gitlab.url}
    if config.gitlab.token:
        gitlab["token"] = config.gitlab.token
    data: dict[str, Any] = {
        "project_id": config.project_id,
        "gitlab": gitlab,
    }
    if config.files:
        data["files"] = list(config.files)
    return data


def save_config(config: Config, path: Path) -> None:
    """Write the configuration to disk."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(dump_config(config), handle, sort_keys=False)
