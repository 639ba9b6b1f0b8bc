"""
Build components for uccmake.

This package provides:
- Source tree flattening
- Artifact backup
- External process execution
- Compiler output classification
- Build pipeline orchestration
"""

from .artifact_backup import ArtifactBackupManager, BackupError
from .output_classifier import (
    BuildSummary,
    ClassifiedEvent,
    ClassifierError,
    CompileAborted,
    Diagnostic,
    DiagnosticSeverity,
    FileCopyProgress,
    FileCopyTotal,
    OutputTally,
    PlainLine,
    SummarySeverity,
    classify_line,
    event_severity,
)
from .pipeline import (
    Aborted,
    BuildOutcome,
    BuildPipeline,
    CompileFailed,
    HookFailed,
    PipelineState,
    Succeeded,
)
from .process_runner import ProcessLaunchError, ProcessRunner, RunningProcess
from .source_flattener import (
    DestinationNotDirectoryError,
    DestinationNotEmptyError,
    FileOutcome,
    FlattenError,
    FlattenResult,
    SourceDirectoryNotFoundError,
    SourceFlattener,
)

__all__ = [
    "ArtifactBackupManager",
    "BackupError",
    "BuildSummary",
    "ClassifiedEvent",
    "ClassifierError",
    "CompileAborted",
    "Diagnostic",
    "DiagnosticSeverity",
    "FileCopyProgress",
    "FileCopyTotal",
    "OutputTally",
    "PlainLine",
    "SummarySeverity",
    "classify_line",
    "event_severity",
    "Aborted",
    "BuildOutcome",
    "BuildPipeline",
    "CompileFailed",
    "HookFailed",
    "PipelineState",
    "Succeeded",
    "ProcessLaunchError",
    "ProcessRunner",
    "RunningProcess",
    "DestinationNotDirectoryError",
    "DestinationNotEmptyError",
    "FileOutcome",
    "FlattenError",
    "FlattenResult",
    "SourceDirectoryNotFoundError",
    "SourceFlattener",
]
