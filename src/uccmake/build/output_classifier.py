"""
Classification of compiler and hook output.

`ucc make` and the hook scripts print human-oriented text. classify_line()
recovers structure from one line at a time so the pipeline can reason about
severities and counts. Rules, first match wins:

1. `<source> : Warning, <message>` / `<source> : Error, <message>` -> Diagnostic
2. `Compile aborted due to errors.`                               -> CompileAborted
3. `Success - N error(s), M warning(s)` / `Failure - ...`         -> BuildSummary
4. `Copying <file> ...`                                           -> FileCopyProgress
5. `<N> file(s) copied.`                                          -> FileCopyTotal
6. anything else                                                  -> PlainLine

Classification is total. Only a summary line with non-numeric counts raises
(ClassifierError).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from ..constants import Compiler, PostBuild
from ..errors import UccMakeError


class ClassifierError(UccMakeError):
    """Raised when a recognised line carries malformed fields."""
    pass


class DiagnosticSeverity(Enum):
    WARNING = "Warning"
    ERROR = "Error"


# Leading token of the text after " : ", e.g. "Warning, 'Foo' obscures 'Bar'"
SEVERITY_TOKENS = tuple(f"{severity.value}," for severity in DiagnosticSeverity)


class SummarySeverity(Enum):
    SUCCESS = "Success"
    FAILURE = "Failure"


@dataclass(frozen=True)
class Diagnostic:
    """A compiler warning or error attributed to a source identifier."""

    severity: DiagnosticSeverity
    source: str
    message: str


@dataclass(frozen=True)
class CompileAborted:
    """The compiler gave up because of errors."""


@dataclass(frozen=True)
class BuildSummary:
    """The compiler's closing status line."""

    severity: SummarySeverity
    error_count: int
    warning_count: int


@dataclass(frozen=True)
class FileCopyProgress:
    """A hook script copying one file."""

    file_name: str


@dataclass(frozen=True)
class FileCopyTotal:
    """A hook script's copied-files total."""

    count: int


@dataclass(frozen=True)
class PlainLine:
    """Any line without recognised structure."""

    text: str


ClassifiedEvent = Union[
    Diagnostic, CompileAborted, BuildSummary, FileCopyProgress, FileCopyTotal, PlainLine
]


def classify_line(line: str) -> ClassifiedEvent:
    """
    Classify one line of compiler or hook output.

    Args:
        line: Output line without its line terminator

    Returns:
        The event the line represents (PlainLine if nothing matched)

    Raises:
        ClassifierError: If a summary line has non-numeric counts
    """
    if Compiler.ERROR_MARKER in line:
        return _parse_diagnostic(line, DiagnosticSeverity.ERROR)
    if Compiler.WARNING_MARKER in line:
        return _parse_diagnostic(line, DiagnosticSeverity.WARNING)

    if line == Compiler.ABORTED_MESSAGE:
        return CompileAborted()

    if line.startswith(Compiler.SUCCESS_PREFIX):
        return _parse_summary(line, Compiler.SUCCESS_PREFIX, SummarySeverity.SUCCESS)
    if line.startswith(Compiler.FAILURE_PREFIX):
        return _parse_summary(line, Compiler.FAILURE_PREFIX, SummarySeverity.FAILURE)

    if line.startswith(PostBuild.COPYING_PREFIX):
        tokens = line.split()
        if len(tokens) >= 2:
            return FileCopyProgress(file_name=tokens[1])

    if line.endswith(PostBuild.COPIED_SUFFIX):
        count = _parse_count(line.strip().split()[0])
        if count is not None:
            return FileCopyTotal(count=count)

    return PlainLine(text=line)


def _parse_diagnostic(line: str, severity: DiagnosticSeverity) -> Diagnostic:
    source, separator, remainder = line.partition(Compiler.SOURCE_SEPARATOR)
    if not separator:
        # Marker without a "source : message" shape; keep the text as the message
        return Diagnostic(severity=severity, source="", message=line.strip())

    message = remainder.strip()
    for token in SEVERITY_TOKENS:
        if message.startswith(token):
            message = message[len(token):]
            break
    return Diagnostic(severity=severity, source=source.strip(), message=message.strip())


def _parse_summary(line: str, prefix: str, severity: SummarySeverity) -> BuildSummary:
    parts = line[len(prefix):].split(Compiler.SUMMARY_SEPARATOR)
    if len(parts) != 2:
        raise ClassifierError(f"Malformed build summary: {line!r}")

    error_count, warning_count = (_summary_count(part, line) for part in parts)
    return BuildSummary(severity=severity, error_count=error_count, warning_count=warning_count)


def _summary_count(part: str, line: str) -> int:
    tokens = part.split()
    count = _parse_count(tokens[0]) if tokens else None
    if count is None:
        raise ClassifierError(f"Malformed count in build summary: {line!r}")
    return count


def _parse_count(token: str) -> Optional[int]:
    if not (token.isascii() and token.isdigit()):
        return None
    return int(token)


def event_severity(event: ClassifiedEvent) -> str:
    """
    Map an event to the Reporter method it should be logged with.

    Returns:
        "info", "warn" or "error"
    """
    if isinstance(event, Diagnostic):
        return "error" if event.severity is DiagnosticSeverity.ERROR else "warn"
    if isinstance(event, BuildSummary):
        return "info" if event.severity is SummarySeverity.SUCCESS else "error"
    if isinstance(event, CompileAborted):
        return "error"
    return "info"


class OutputTally:
    """Running totals over a classified output stream."""

    def __init__(self):
        self.warnings = 0
        self.errors = 0
        self.aborted = False
        self.summary: Optional[BuildSummary] = None
        self.classifier_faults = 0

    def add(self, event: ClassifiedEvent) -> None:
        if isinstance(event, Diagnostic):
            if event.severity is DiagnosticSeverity.ERROR:
                self.errors += 1
            else:
                self.warnings += 1
        elif isinstance(event, CompileAborted):
            self.aborted = True
        elif isinstance(event, BuildSummary):
            self.summary = event

    def counts(self) -> Tuple[int, int]:
        """Return (errors, warnings), preferring the compiler's own summary."""
        if self.summary is not None:
            return self.summary.error_count, self.summary.warning_count
        return self.errors, self.warnings
