"""
Build pipeline for a UnrealScript module.

This module sequences a single `ucc make` run:
- PreBuild.bat (optional)
- Backup of the previous <Module>.u
- Compilation, with every output line classified and reported
- PostBuild.bat (optional, only after a successful compile)

Every external process runs exactly once. Nothing is retried.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from ..reporting import Reporter
from ..workspace import WorkspaceError, WorkspacePaths
from .artifact_backup import ArtifactBackupManager, BackupError
from .output_classifier import ClassifierError, OutputTally, classify_line, event_severity
from .process_runner import ProcessLaunchError, ProcessRunner


class PipelineState(Enum):
    IDLE = "idle"
    PRE_BUILD = "pre-build"
    BACKUP = "backup"
    COMPILING = "compiling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"
    POST_BUILD = "post-build"
    DONE = "done"


@dataclass(frozen=True)
class Aborted:
    """The pipeline stopped before or while starting the compiler."""

    reason: str

    @property
    def exit_code(self) -> int:
        return 1


@dataclass(frozen=True)
class CompileFailed:
    """The compiler ran and exited nonzero."""

    error_count: int
    warning_count: int
    exit_code: int = 1


@dataclass(frozen=True)
class Succeeded:
    """The compiler exited with 0."""

    error_count: int
    warning_count: int

    @property
    def exit_code(self) -> int:
        return 0


@dataclass(frozen=True)
class HookFailed:
    """A hook exited nonzero while strict hooks were enabled."""

    hook: str
    hook_exit_code: int

    @property
    def exit_code(self) -> int:
        return 1


BuildOutcome = Union[Aborted, CompileFailed, Succeeded, HookFailed]


@dataclass(frozen=True)
class StepResult:
    """Exit code and tallied output of one external process."""

    exit_code: int
    tally: OutputTally


class BuildPipeline:
    """
    Runs the pre-build, backup, compile and post-build steps for a workspace.

    Example usage:
        paths = WorkspacePaths.from_directory(Path("MyMod"))
        pipeline = BuildPipeline(paths, LoggingReporter())
        outcome = pipeline.run()
        sys.exit(outcome.exit_code)
    """

    def __init__(
        self,
        paths: WorkspacePaths,
        reporter: Reporter,
        runner: Optional[ProcessRunner] = None,
        backup_manager: Optional[ArtifactBackupManager] = None,
        strict_hooks: bool = False,
    ):
        """
        Initialize build pipeline.

        Args:
            paths: Paths of the workspace to build
            reporter: Receives every log message of the build
            runner: Process runner (defaults to ProcessRunner())
            backup_manager: Backup manager (defaults to one using reporter)
            strict_hooks: Fail the build when a hook exits nonzero
        """
        self.paths = paths
        self.reporter = reporter
        self.runner = runner or ProcessRunner()
        self.backup_manager = backup_manager or ArtifactBackupManager(reporter)
        self.strict_hooks = strict_hooks
        self.state = PipelineState.IDLE
        self.history: List[PipelineState] = [PipelineState.IDLE]

    def run(self) -> BuildOutcome:
        """
        Execute the build.

        Returns:
            The outcome of the build. Expected failures are returned, not raised.
        """
        # Both preconditions are checked before any side effect happens
        try:
            self.paths.validate()
        except WorkspaceError as e:
            return self._abort(str(e))

        self._enter(PipelineState.PRE_BUILD)
        pre_build = self._run_hook(self.paths.pre_build_hook_path)
        if pre_build is not None:
            return pre_build

        self._enter(PipelineState.BACKUP)
        try:
            self.backup_manager.backup(self.paths.artifact_path, self.paths.artifact_backup_path)
        except BackupError as e:
            self.reporter.fatal(str(e))
            self._enter(PipelineState.FAILED)
            return Aborted(reason=str(e))

        self._enter(PipelineState.COMPILING)
        self.reporter.info(f"Compiling {self.paths.module_name}")
        try:
            step = self._run_process(
                self.paths.compiler_executable_path,
                ["make", f"-ini={self.paths.configuration_file_path}"],
                self.paths.system_directory,
            )
        except ProcessLaunchError as e:
            return self._abort(str(e))

        error_count, warning_count = step.tally.counts()
        if step.exit_code != 0:
            self._enter(PipelineState.FAILED)
            self.reporter.error(
                f"Compilation of {self.paths.module_name} failed with exit code {step.exit_code}"
            )
            return CompileFailed(error_count, warning_count, exit_code=step.exit_code)

        self._enter(PipelineState.SUCCEEDED)

        self._enter(PipelineState.POST_BUILD)
        post_build = self._run_hook(self.paths.post_build_hook_path)
        if post_build is not None:
            return post_build

        self._enter(PipelineState.DONE)
        return Succeeded(error_count, warning_count)

    def _run_hook(self, hook_path: Path) -> Optional[Union[HookFailed, Aborted]]:
        """
        Run a hook if it exists.

        A hook that cannot be started aborts the build. A nonzero exit is
        reported and skipped unless strict hooks are enabled, in which case
        HookFailed is returned.
        """
        if not hook_path.is_file():
            return None

        self.reporter.info(f"Running {hook_path.name}")
        try:
            step = self._run_process(hook_path, [], self.paths.workspace_directory)
        except ProcessLaunchError as e:
            return self._abort(str(e))
        if step.exit_code == 0:
            return None

        message = f"{hook_path.name} exited with code {step.exit_code}"
        if not self.strict_hooks:
            self.reporter.warn(message)
            return None

        self.reporter.error(message)
        self._enter(PipelineState.FAILED)
        return HookFailed(hook=hook_path.name, hook_exit_code=step.exit_code)

    def _run_process(self, executable: Path, arguments: List[str], working_directory: Path) -> StepResult:
        process = self.runner.start(executable, arguments, working_directory)
        tally = OutputTally()
        for line in process.lines():
            try:
                event = classify_line(line)
            except ClassifierError as e:
                tally.classifier_faults += 1
                self.reporter.error(str(e))
                continue
            tally.add(event)
            getattr(self.reporter, event_severity(event))(line)
        return StepResult(exit_code=process.wait(), tally=tally)

    def _abort(self, reason: str) -> Aborted:
        self.reporter.fatal(reason)
        self._enter(PipelineState.ABORTED)
        return Aborted(reason=reason)

    def _enter(self, state: PipelineState) -> None:
        self.state = state
        self.history.append(state)
