"""Release archive creation."""

from __future__ import annotations

import tarfile
from pathlib import Path
from typing import Sequence

from .utils import log_debug
from .versions import Version

ARCHIVE_SUFFIX = ".tar.gz"


class ArchiveError(RuntimeError):
    """Raised when the release archive cannot be created."""


def archive_name(version: Version) -> str:
    """Return the archive file name for a release version."""
    return f"{version}{ARCHIVE_SUFFIX}"


def create_archive(paths: Sequence[str], destination: Path, *, base_dir: Path | None = None) -> Path:
    """Pack ``paths`` into a gzip-compressed tarball at ``destination``.

    Relative paths are resolved against ``base_dir`` (default: the current
    directory) and stored under their given names. An existing destination
    is overwritten.
    """
    if not paths:
        raise ArchiveError("no files configured for the release archive")
    root = base_dir if base_dir is not None else Path.cwd()
    sources: list[tuple[Path, str]] = []
    for raw in paths:
        source = Path(raw)
        if not source.is_absolute():
            source = root / source
        if not source.exists():
            raise ArchiveError(f"cannot archive missing path: {raw}")
        arcname = source.name if Path(raw).is_absolute() else Path(raw).as_posix()
        sources.append((source, arcname))

    destination.parent.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(destination, "w:gz") as archive:
            for source, arcname in sources:
                log_debug(f"adding {source} as {arcname}")
                archive.add(source, arcname=arcname)
    except OSError as exc:
        raise ArchiveError(f"failed to write {destination}: {exc}") from exc
    return destination
