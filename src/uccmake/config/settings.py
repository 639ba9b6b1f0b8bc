"""
Build settings.

A build is configured by one BuildSettings value created at startup, from
the environment first and command-line flags second. Nothing below the CLI
reads the environment or the current directory itself.

Environment variables:
    UCCMAKE_COMPILER      Path of the compiler binary (overrides System/ucc.exe)
    UCCMAKE_STRICT_HOOKS  Fail the build when a hook exits nonzero
    UCCMAKE_LOG_FILE      Also log to this rotating file
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from ..constants import File
from ..errors import UccMakeError

ENV_COMPILER = "UCCMAKE_COMPILER"
ENV_STRICT_HOOKS = "UCCMAKE_STRICT_HOOKS"
ENV_LOG_FILE = "UCCMAKE_LOG_FILE"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class ConfigurationError(UccMakeError):
    """Raised when a setting has an invalid value."""
    pass


@dataclass
class BuildSettings:
    """Settings for a single uccmake invocation."""

    workspace: Path = field(default_factory=Path.cwd)
    compiler_name: str = File.UCC
    compiler_path: Optional[Path] = None
    strict_hooks: bool = False
    show_progress: bool = True
    verbose: bool = False
    log_file: Optional[Path] = None

    @classmethod
    def from_environment(
        cls,
        workspace: Path,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "BuildSettings":
        """Create settings for a workspace, overlaid with UCCMAKE_* variables.

        Args:
            workspace: Workspace (module) directory
            environ: Environment mapping (defaults to os.environ)

        Returns:
            BuildSettings instance

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        environ = os.environ if environ is None else environ
        settings = cls(workspace=Path(workspace))

        compiler = environ.get(ENV_COMPILER)
        if compiler:
            settings.compiler_path = Path(compiler)

        if ENV_STRICT_HOOKS in environ:
            settings.strict_hooks = parse_bool(ENV_STRICT_HOOKS, environ[ENV_STRICT_HOOKS])

        log_file = environ.get(ENV_LOG_FILE)
        if log_file:
            settings.log_file = Path(log_file)

        return settings


def parse_bool(name: str, value: str) -> bool:
    """Parse a boolean flag value.

    Raises:
        ConfigurationError: If the value is not a recognised boolean
    """
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")
