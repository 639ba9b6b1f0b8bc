"""
Workspace path resolution.

A workspace is the directory of one UnrealScript module. Its layout is fixed:

    <parent>/
        System/
            ucc.exe
            <Module>.u          (artifact)
            <Module>.u.bak      (backup of the previous artifact)
        <Module>/               (workspace)
            make.ini
            PreBuild.bat        (optional)
            PostBuild.bat       (optional)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .constants import File
from .errors import UccMakeError


class WorkspaceError(UccMakeError):
    """Raised when a workspace does not have the expected layout."""
    pass


class MissingExecutableError(WorkspaceError):
    """Raised when the compiler binary does not exist."""
    pass


class MissingConfigurationError(WorkspaceError):
    """Raised when the workspace has no make.ini."""
    pass


@dataclass(frozen=True)
class WorkspacePaths:
    """Every path a build touches, computed once per invocation."""

    module_name: str
    workspace_directory: Path
    system_directory: Path
    compiler_executable_path: Path
    configuration_file_path: Path
    artifact_path: Path
    artifact_backup_path: Path
    pre_build_hook_path: Path
    post_build_hook_path: Path

    @classmethod
    def from_directory(
        cls,
        workspace: Path,
        compiler_name: str = File.UCC,
        compiler_path: Optional[Path] = None,
    ) -> "WorkspacePaths":
        """Compute the paths of a workspace without touching the filesystem.

        Args:
            workspace: Workspace directory
            compiler_name: File name of the compiler inside System/
            compiler_path: Explicit compiler location, used as-is when given

        Returns:
            WorkspacePaths for the workspace
        """
        workspace = Path(workspace).absolute()
        module_name = workspace.name
        system_directory = workspace.parent / File.SYSTEM_DIRECTORY
        artifact_path = system_directory / f"{module_name}{File.ARTIFACT_SUFFIX}"

        if compiler_path is None:
            compiler_path = system_directory / compiler_name

        return cls(
            module_name=module_name,
            workspace_directory=workspace,
            system_directory=system_directory,
            compiler_executable_path=Path(compiler_path).absolute(),
            configuration_file_path=workspace / File.MAKE_INI,
            artifact_path=artifact_path,
            artifact_backup_path=artifact_path.with_name(artifact_path.name + File.BACKUP_SUFFIX),
            pre_build_hook_path=workspace / File.PRE_BUILD,
            post_build_hook_path=workspace / File.POST_BUILD,
        )

    def validate(self) -> None:
        """Check that the compiler and its configuration exist.

        Raises:
            MissingExecutableError: If the compiler binary is missing
            MissingConfigurationError: If make.ini is missing
        """
        if not self.compiler_executable_path.is_file():
            raise MissingExecutableError(
                f"Compiler not found: {self.compiler_executable_path}"
            )
        if not self.configuration_file_path.is_file():
            raise MissingConfigurationError(
                f"Configuration file not found: {self.configuration_file_path}"
            )


def resolve_workspace(
    workspace: Path,
    compiler_name: str = File.UCC,
    compiler_path: Optional[Path] = None,
) -> WorkspacePaths:
    """Compute and validate the paths of a workspace.

    Raises:
        MissingExecutableError: If the compiler binary is missing
        MissingConfigurationError: If make.ini is missing
    """
    paths = WorkspacePaths.from_directory(workspace, compiler_name, compiler_path)
    paths.validate()
    return paths
