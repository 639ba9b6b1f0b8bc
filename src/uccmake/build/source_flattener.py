"""
Source tree flattening.

The compiler only reads sources from a single directory level (`Classes/`),
while modules are often maintained as nested trees. The flattener copies
every file of a nested tree into one flat directory.

Traversal is depth-first with entries sorted by name, files of a directory
before its subdirectories. Files sharing a base name overwrite each other in
that order (last write wins); FlattenResult.collisions lists such names.
"""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from ..errors import UccMakeError


class FlattenError(UccMakeError):
    """Raised when flattening cannot start."""
    pass


class SourceDirectoryNotFoundError(FlattenError):
    """Raised when the source tree does not exist."""
    pass


class DestinationNotEmptyError(FlattenError):
    """Raised when the destination already holds files."""
    pass


class DestinationNotDirectoryError(FlattenError):
    """Raised when the destination path exists but is not a directory."""
    pass


@dataclass(frozen=True)
class FileOutcome:
    """Result of copying one file."""

    path: Path
    succeeded: bool
    error: Optional[str] = None


@dataclass
class FlattenResult:
    """Outcome of a flatten operation."""

    total_files: int
    flattened_files: int
    outcomes: List[FileOutcome] = field(default_factory=list)
    collisions: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True when every file was copied."""
        return self.flattened_files == self.total_files

    @property
    def failed(self) -> List[FileOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]


class SourceFlattener:
    """Copies a nested source tree into a flat directory.

    Example usage:
        flattener = SourceFlattener()
        result = flattener.flatten(Path("Src"), Path("Classes"))
        if not result.complete:
            print(f"{len(result.failed)} files could not be copied")
    """

    def __init__(self, show_progress: bool = True):
        """
        Initialize source flattener.

        Args:
            show_progress: Show a progress bar while copying
        """
        self.show_progress = show_progress

    def flatten(self, source_dir: Path, destination_dir: Path) -> FlattenResult:
        """
        Copy every file below source_dir into destination_dir.

        Args:
            source_dir: Root of the nested source tree
            destination_dir: Flat destination directory (created if absent)

        Returns:
            FlattenResult with per-file outcomes

        Raises:
            SourceDirectoryNotFoundError: If source_dir is not a directory
            DestinationNotEmptyError: If destination_dir already contains files
            DestinationNotDirectoryError: If destination_dir exists as a file
            FlattenError: If destination_dir cannot be created
        """
        source_dir = Path(source_dir).absolute()
        destination_dir = Path(destination_dir).absolute()

        if not source_dir.is_dir():
            raise SourceDirectoryNotFoundError(f"Source directory not found: {source_dir}")

        if destination_dir.exists() and not destination_dir.is_dir():
            raise DestinationNotDirectoryError(
                f"Destination is not a directory: {destination_dir}"
            )

        if destination_dir.is_dir() and self._contains_files(destination_dir):
            raise DestinationNotEmptyError(
                f"Destination directory is not empty: {destination_dir}"
            )

        files = self.collect_files(source_dir, exclude=destination_dir)
        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FlattenError(f"Cannot create destination directory {destination_dir}: {e}") from e

        result = FlattenResult(total_files=len(files), flattened_files=0)
        seen = set()

        for path in tqdm(files, desc="Flattening", unit="file", disable=not self.show_progress):
            if path.name in seen and path.name not in result.collisions:
                result.collisions.append(path.name)
            seen.add(path.name)

            try:
                shutil.copyfile(path, destination_dir / path.name)
            except OSError as e:
                result.outcomes.append(FileOutcome(path=path, succeeded=False, error=str(e)))
                continue

            result.outcomes.append(FileOutcome(path=path, succeeded=True))
            result.flattened_files += 1

        return result

    @staticmethod
    def collect_files(source_dir: Path, exclude: Optional[Path] = None) -> List[Path]:
        """
        List the files of a tree in flattening order.

        Args:
            source_dir: Root of the tree
            exclude: Directory to leave out (e.g. a destination nested in the tree)

        Returns:
            Files in depth-first, name-sorted order
        """
        files: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(source_dir):
            current = Path(dirpath)
            # os.walk visits dirnames in list order, so sorting in place fixes the traversal
            dirnames[:] = sorted(d for d in dirnames if exclude is None or current / d != exclude)
            files.extend(current / name for name in sorted(filenames))
        return files

    @staticmethod
    def _contains_files(directory: Path) -> bool:
        return any(path.is_file() for path in directory.rglob("*"))
