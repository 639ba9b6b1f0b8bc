"""CLI utility functions for uccmake.

This module provides common utilities used by the CLI including:
- Build header formatting
- Workspace path validation
- Exit status conventions
"""

import sys
from pathlib import Path

# Exit statuses
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INVALID_PATH = 2
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT


def format_build_banner(version: str, module_name: str) -> str:
    """Format the header printed before a build.

    The rule under and over the header is as wide as its longest line.
    """
    lines = [f"uccmake v{version}", f"Module: {module_name}"]
    rule = "=" * max(len(line) for line in lines)
    return "\n".join([rule, *lines, rule])


class PathValidator:
    """Validates workspace paths."""

    RED = "\033[1;31m"
    RESET = "\033[0m"

    @staticmethod
    def validate_workspace(workspace: Path) -> None:
        """Validate that the workspace exists and is a directory.

        Args:
            workspace: Path to validate

        Raises:
            SystemExit: If path doesn't exist or isn't a directory
        """
        if not workspace.exists():
            print(f"{PathValidator.RED}✗ Error: Path does not exist: {workspace}{PathValidator.RESET}")
            sys.exit(EXIT_INVALID_PATH)
        if not workspace.is_dir():
            print(f"{PathValidator.RED}✗ Error: Path is not a directory: {workspace}{PathValidator.RESET}")
            sys.exit(EXIT_INVALID_PATH)
