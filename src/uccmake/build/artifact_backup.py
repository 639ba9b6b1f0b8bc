"""
Artifact backup.

Before compiling, the previous `<Module>.u` is moved to `<Module>.u.bak` so
the compiler starts without a stale artifact. Assumes a single writer: no
other build runs against the same workspace at the same time.
"""

import shutil
from pathlib import Path

from ..errors import UccMakeError
from ..reporting import Reporter


class BackupError(UccMakeError):
    """Raised when the previous artifact could not be moved aside."""
    pass


class ArtifactBackupManager:
    """Moves a previous build artifact out of the compiler's way."""

    def __init__(self, reporter: Reporter):
        self.reporter = reporter

    def backup(self, artifact_path: Path, backup_path: Path) -> bool:
        """
        Replace backup_path with the current artifact and remove the artifact.

        Args:
            artifact_path: Compiled module file
            backup_path: Where the previous artifact is kept

        Returns:
            True if an artifact was backed up, False if there was none

        Raises:
            BackupError: If any step fails. The artifact may still be present.
        """
        if not artifact_path.exists():
            return False

        try:
            if backup_path.exists():
                backup_path.unlink()
        except OSError as e:
            raise BackupError(f"Failed to delete old backup {backup_path}: {e}") from e

        try:
            shutil.copy2(artifact_path, backup_path)
        except OSError as e:
            raise BackupError(f"Failed to copy {artifact_path} to {backup_path}: {e}") from e

        self.reporter.info(f"Created backup of {artifact_path}")
        self.reporter.info(f"Backup saved as {backup_path}")

        try:
            artifact_path.unlink()
        except OSError as e:
            raise BackupError(f"Failed to delete {artifact_path} after backup: {e}") from e

        return True
