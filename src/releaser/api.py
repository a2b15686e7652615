"""Python-friendly facade for invoking releaser functionality."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .cli import CLIContext, ReleaseOutcome, create_cli_context, create_release


class Releaser:
    """High-level helper that mirrors the CLI commands for Python callers."""

    def __init__(
        self,
        *,
        config: Path | str | None = None,
        debug: bool = False,
    ) -> None:
        resolved_config = Path(config) if config is not None else None
        self._ctx = create_cli_context(config=resolved_config, debug=debug)

    @property
    def context(self) -> CLIContext:
        """Expose the underlying CLIContext for advanced scenarios."""

        return self._ctx

    def release(
        self,
        *,
        version: Optional[str] = None,
        dry_run: bool = False,
        output_dir: Path | str | None = None,
    ) -> ReleaseOutcome:
        """Run the same workflow as ``releaser release``."""

        return create_release(
            self._ctx,
            version=version,
            dry_run=dry_run,
            output_dir=Path(output_dir) if output_dir is not None else None,
        )

    def changelog(self, *, version: Optional[str] = None) -> str:
        """Return the changelog for a release without publishing anything."""

        return create_release(self._ctx, version=version, dry_run=True, echo=False).changelog
