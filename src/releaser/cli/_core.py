"""Core CLI infrastructure: context, entry point, and shared helpers."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version as metadata_version
from pathlib import Path
from typing import Optional

import click
import yaml

from .. import __version__ as package_version
from ..config import Config, TOKEN_ENV_VAR, default_config_path, load_config
from ..gitlab import GitLabClient, HostingService
from ..utils import (
    INFO_PREFIX,
    abort_on_user_interrupt,
    configure_logging,
    log_debug,
    log_info,
    log_warning,
)

__all__ = [
    "CLIContext",
    "INFO_PREFIX",
    "VERSION_FLAGS",
    "create_cli_context",
    "_create_cli_group",
    "main",
]

VERSION_FLAGS = {"--version", "-V"}


def _resolve_cli_version() -> str:
    try:
        return metadata_version("releaser")
    except PackageNotFoundError:
        return package_version


@dataclass
class CLIContext:
    """Shared command context."""

    config_path: Path
    _config: Optional[Config] = None

    @property
    def project_root(self) -> Path:
        """Directory that relative file paths in the config refer to."""
        return self.config_path.parent

    def ensure_config(self) -> Config:
        if self._config is None:
            try:
                self._config = load_config(self.config_path)
            except FileNotFoundError:
                log_info(f"no releaser config found at {self.config_path}.")
                log_info("create config.yml in the working directory or pass --config.")
                raise click.exceptions.Exit(1)
            except yaml.YAMLError as error:
                raise click.ClickException(
                    f"Failed to parse config file {self.config_path}: {error}"
                ) from error
            except ValueError as error:
                raise click.ClickException(str(error)) from error
        return self._config

    def open_service(self) -> HostingService:
        """Return a GitLab client for the configured project."""
        config = self.ensure_config()
        if not config.gitlab.token:
            log_warning(
                f"no GitLab token configured; set gitlab.token or {TOKEN_ENV_VAR}."
            )
        log_debug(f"connecting to {config.gitlab.url} for project {config.project_id}")
        return GitLabClient(config.gitlab.url, config.gitlab.token, config.project_id)


def create_cli_context(
    *,
    config: Optional[Path] = None,
    debug: bool = False,
) -> CLIContext:
    """Return a CLIContext using the same resolution logic as the CLI entry point."""

    configure_logging(debug)
    config_path = config.resolve() if config else default_config_path(Path(".").resolve())
    log_debug(f"using config path: {config_path}")
    return CLIContext(config_path=config_path)


# Placeholder for the cli group - defined once all commands are importable
cli: click.Group = None  # type: ignore[assignment]


def _create_cli_group() -> click.Group:
    """Create the main CLI group. Called after all commands are defined."""

    @click.group(context_settings={"help_option_names": ["-h", "--help"]})
    @click.option(
        "--config",
        type=click.Path(path_type=Path, dir_okay=False),
        help="Path to the releaser config YAML file (default: ./config.yml).",
    )
    @click.option(
        "--debug",
        "-d",
        is_flag=True,
        help="Enable debug logging.",
    )
    @click.pass_context
    def _cli(
        ctx: click.Context,
        config: Optional[Path],
        debug: bool,
    ) -> None:
        """Cut GitLab releases with changelogs built from merged merge requests."""

        ctx.obj = create_cli_context(config=config, debug=debug)

    return click.version_option(version=_resolve_cli_version())(_cli)


def main(argv: list[str] | None = None) -> int:
    """Entry point for console_scripts."""
    # Import cli here to avoid circular import at module load time
    from . import cli

    args = list(argv) if argv is not None else list(sys.argv[1:])

    # Subcommands define their own --version option.
    command_index = next(
        (index for index, arg in enumerate(args) if arg in cli.commands), len(args)
    )
    if any(flag in VERSION_FLAGS for flag in args[:command_index]):
        click.echo(_resolve_cli_version())
        return 0

    try:
        result = cli.main(args=args, prog_name="releaser", standalone_mode=False)
    except click.ClickException as exc:
        exc.show(file=sys.stderr)
        exit_code = getattr(exc, "exit_code", 1)
        return exit_code if isinstance(exit_code, int) else 1
    except click.exceptions.Exit as exc:
        return exc.exit_code if isinstance(exc.exit_code, int) else 0
    except KeyboardInterrupt as exc:
        try:
            abort_on_user_interrupt(exc)
        except click.exceptions.Exit as exit_exc:
            exit_code = getattr(exit_exc, "exit_code", 130)
            return exit_code if isinstance(exit_code, int) else 130
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0
    return result if isinstance(result, int) else 0
