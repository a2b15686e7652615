"""Release command: resolve tags, build the changelog, and publish."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import NoReturn, Optional, Sequence

import click
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from ..archive import ArchiveError, archive_name, create_archive
from ..changelog import ChangeRequestSummary, build_window, render_changelog
from ..errors import ReleaseError
from ..gitlab import HostingServiceError
from ..resolve import ResolvedTag, resolve_previous, resolve_release
from ..utils import (
    console,
    emit_output,
    format_bold,
    log_debug,
    log_info,
    log_success,
    log_warning,
)
from ._core import CLIContext

__all__ = [
    "ReleaseOutcome",
    "StepStatus",
    "StepTracker",
    "create_release",
    "release_cmd",
]


# Steps that leave artifacts behind when a later step fails.
_ARTIFACT_STEPS = {"archive", "upload", "release"}


class StepStatus(Enum):
    """Status of a release workflow step."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ReleaseStep:
    """A single step in the release workflow."""

    name: str
    description: str
    status: StepStatus = StepStatus.PENDING


@dataclass
class StepTracker:
    """Tracks progress through release workflow steps."""

    steps: list[ReleaseStep] = field(default_factory=list)

    def add(self, name: str, description: str) -> None:
        """Add a step to track."""
        self.steps.append(ReleaseStep(name, description))

    def _set(self, name: str, status: StepStatus) -> None:
        for step in self.steps:
            if step.name == name:
                step.status = status

    def complete(self, name: str) -> None:
        """Mark a step as completed."""
        self._set(name, StepStatus.COMPLETED)

    def fail(self, name: str) -> None:
        """Mark a step as failed."""
        self._set(name, StepStatus.FAILED)


def _render_release_progress(tracker: StepTracker) -> None:
    """Render release progress summary to stderr on failure."""
    total = len(tracker.steps)
    done = len([s for s in tracker.steps if s.status == StepStatus.COMPLETED])
    progress = f"{done}/{total}"

    lines: list[str] = []
    for step in tracker.steps:
        if step.status == StepStatus.COMPLETED:
            icon = "[green]✔[/green]"
            text = f"[dim]{escape(step.description)}[/dim]"
        elif step.status == StepStatus.FAILED:
            icon = "[red]✘[/red]"
            text = f"[red]{escape(step.description)}[/red]"
        else:
            icon = "[dim]○[/dim]"
            text = f"[dim]{escape(step.description)}[/dim]"
        lines.append(f"{icon} {text}")

    if lines:
        content = Text.from_markup("\n".join(lines))
        console.print(Panel(content, title=f"Release Progress ({progress})", border_style="red"))

    if any(
        step.status == StepStatus.COMPLETED and step.name in _ARTIFACT_STEPS for step in tracker.steps
    ):
        console.print(
            "[bold]Completed steps are not rolled back; clean up the project manually.[/bold]",
            highlight=False,
        )


@dataclass
class ReleaseOutcome:
    """Result of a release run."""

    release: ResolvedTag
    previous: ResolvedTag
    changelog: str
    change_requests: list[ChangeRequestSummary]
    archive_path: Path | None = None
    asset_url: str | None = None
    tag_name: str | None = None


def _describe_count(items: Sequence[ChangeRequestSummary]) -> str:
    noun = "merge request" if len(items) == 1 else "merge requests"
    return f"{len(items)} {noun}"


def create_release(
    ctx: CLIContext,
    *,
    version: Optional[str],
    dry_run: bool = False,
    output_dir: Optional[Path] = None,
    echo: bool = True,
) -> ReleaseOutcome:
    """Python wrapper around the ``release`` command."""

    config = ctx.ensure_config()

    tracker = StepTracker()
    tracker.add("tags", "fetch project tags")
    tracker.add("changelog", "resolve versions and collect merged merge requests")
    tracker.add("archive", "archive release files")
    tracker.add("upload", "upload archive")
    tracker.add("release", "create release")
    tracker.add("link", "link archive to release")

    def _fail_step_and_raise(step_name: str, exc: Exception) -> NoReturn:
        """Mark step as failed, render progress, and re-raise the exception."""
        tracker.fail(step_name)
        _render_release_progress(tracker)
        raise click.ClickException(str(exc)) from exc

    with ctx.open_service() as service:
        try:
            catalog = service.list_tags()
        except (HostingServiceError, ValueError) as exc:
            _fail_step_and_raise("tags", exc)
        tracker.complete("tags")
        log_debug(f"catalog contains {len(catalog)} tags")

        try:
            release = resolve_release(catalog, version)
            previous = resolve_previous(catalog, release.version)
            window = build_window(previous, release)
            log_info(
                f"collecting merge requests between {previous.tag.name} "
                f"and {release.tag.name}."
            )
            log_debug(f"changelog window: {window.start.isoformat()} .. {window.end.isoformat()}")
            change_requests = service.list_merged_change_requests(window.start, window.end)
        except (ReleaseError, HostingServiceError) as exc:
            _fail_step_and_raise("changelog", exc)
        tracker.complete("changelog")
        log_info(f"found {_describe_count(change_requests)} for {release.version}.")

        changelog = render_changelog(release.version, change_requests)
        outcome = ReleaseOutcome(
            release=release,
            previous=previous,
            changelog=changelog,
            change_requests=list(change_requests),
        )

        if dry_run:
            if echo:
                emit_output(changelog, newline=False)
            log_info("dry run: skipped archive, upload, and release creation.")
            return outcome

        destination_dir = output_dir if output_dir is not None else Path.cwd()
        destination = destination_dir / archive_name(release.version)
        try:
            outcome.archive_path = create_archive(
                config.files, destination, base_dir=ctx.project_root
            )
        except ArchiveError as exc:
            _fail_step_and_raise("archive", exc)
        tracker.complete("archive")
        log_success(f"created archive {outcome.archive_path}.")

        try:
            uploaded = service.upload_file(outcome.archive_path)
        except HostingServiceError as exc:
            _fail_step_and_raise("upload", exc)
        tracker.complete("upload")
        outcome.asset_url = uploaded.full_url
        log_success(f"uploaded {uploaded.alt}.")

        try:
            outcome.tag_name = service.create_release(
                name=str(release.version),
                tag_name=release.tag.name,
                description=changelog,
            )
        except HostingServiceError as exc:
            _fail_step_and_raise("release", exc)
        tracker.complete("release")

        try:
            service.link_release_asset(outcome.tag_name, name=uploaded.alt, url=uploaded.full_url)
        except HostingServiceError as exc:
            tracker.fail("link")
            log_warning(f"failed to link archive to release {outcome.tag_name}: {exc}")
        else:
            tracker.complete("link")

    log_success(f"release {format_bold(str(release.version))} created!")
    return outcome


@click.command("release")
@click.option(
    "--version",
    "requested_version",
    default="",
    help="Version or tag to release (default: the latest tag).",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print the changelog and stop before archiving or publishing.",
)
@click.option(
    "--output-dir",
    type=click.Path(path_type=Path, file_okay=False),
    help="Directory for the release archive (default: current directory).",
)
@click.pass_obj
def release_cmd(
    ctx: CLIContext,
    requested_version: str,
    dry_run: bool,
    output_dir: Optional[Path],
) -> None:
    """Create a GitLab release with a changelog and a files archive.

    Without --version the most recent tag is released.
    """

    create_release(
        ctx,
        version=requested_version or None,
        dry_run=dry_run,
        output_dir=output_dir,
    )
