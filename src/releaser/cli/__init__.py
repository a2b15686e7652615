"""CLI package for releaser.

- _core.py: CLIContext, shared utilities, main entry point
- _release.py: release command and workflow
"""

from __future__ import annotations

from ._core import (
    CLIContext,
    INFO_PREFIX,
    VERSION_FLAGS,
    create_cli_context,
    _create_cli_group,
    main,
)
from ._release import (
    ReleaseOutcome,
    StepStatus,
    StepTracker,
    create_release,
    release_cmd,
)

# Create the main CLI group
cli = _create_cli_group()

cli.add_command(release_cmd)


__all__ = [
    "cli",
    "main",
    "CLIContext",
    "INFO_PREFIX",
    "VERSION_FLAGS",
    "create_cli_context",
    "ReleaseOutcome",
    "StepStatus",
    "StepTracker",
    "create_release",
    "release_cmd",
]
