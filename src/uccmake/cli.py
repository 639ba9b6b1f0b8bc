"""
Command-line interface for uccmake.

This module provides the `uccmake` CLI tool for compiling UnrealScript modules.
"""

import argparse
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from uccmake import __version__
from uccmake.build import (
    Aborted,
    BuildOutcome,
    BuildPipeline,
    FlattenError,
    HookFailed,
    SourceFlattener,
    Succeeded,
)
from uccmake.cli_utils import (
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_SUCCESS,
    PathValidator,
    format_build_banner,
)
from uccmake.config import BuildSettings
from uccmake.constants import File
from uccmake.errors import UccMakeError
from uccmake.reporting import LoggingReporter, Reporter, setup_logging
from uccmake.workspace import WorkspacePaths


@dataclass
class FlattenArgs:
    """Arguments for the flatten mode."""

    source_folder: str
    show_progress: bool = True


def build_command(settings: BuildSettings, reporter: Reporter) -> int:
    """Compile the module in settings.workspace.

    Returns:
        Process exit status
    """
    paths = WorkspacePaths.from_directory(
        settings.workspace, settings.compiler_name, settings.compiler_path
    )
    print(format_build_banner(__version__, paths.module_name))
    print()

    pipeline = BuildPipeline(paths, reporter, strict_hooks=settings.strict_hooks)

    start_time = time.time()
    outcome = pipeline.run()
    build_time = time.time() - start_time

    if isinstance(outcome, Succeeded):
        reporter.info(
            f"Build successful: {outcome.error_count} error(s), "
            f"{outcome.warning_count} warning(s) in {build_time:.2f}s"
        )
    else:
        reporter.error(f"Build failed: {describe_outcome(outcome)}")

    return outcome.exit_code


def describe_outcome(outcome: BuildOutcome) -> str:
    """Return a one-line description of a build outcome."""
    if isinstance(outcome, Aborted):
        return f"aborted ({outcome.reason})"
    if isinstance(outcome, HookFailed):
        return f"{outcome.hook} exited with code {outcome.hook_exit_code}"
    return f"{outcome.error_count} error(s), {outcome.warning_count} warning(s)"


def flatten_command(settings: BuildSettings, args: FlattenArgs, reporter: Reporter) -> int:
    """Flatten <workspace>/<source_folder> into <workspace>/classes.

    Returns:
        Process exit status
    """
    source_dir = settings.workspace / args.source_folder
    destination_dir = settings.workspace / File.FLATTEN_DESTINATION

    reporter.info(f"Flattening {source_dir} into {destination_dir}")
    try:
        result = SourceFlattener(show_progress=args.show_progress).flatten(source_dir, destination_dir)
    except FlattenError as e:
        reporter.error(str(e))
        return EXIT_FAILURE

    for outcome in result.failed:
        reporter.error(f"Failed to copy {outcome.path}: {outcome.error}")
    for name in result.collisions:
        reporter.warn(f"{name} exists in more than one folder; the last copy wins")

    summary = f"Flattened {result.flattened_files} of {result.total_files} files"
    if result.complete:
        reporter.info(summary)
        return EXIT_SUCCESS

    reporter.warn(summary)
    return EXIT_FAILURE


def main(argv: Optional[list] = None) -> None:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="uccmake",
        description="Compile an UnrealScript module with ucc make",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"uccmake {__version__}",
    )
    parser.add_argument(
        "workspace",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Module directory containing make.ini (default: current directory)",
    )
    parser.add_argument(
        "--flattensource",
        metavar="FOLDER",
        default=None,
        help="Copy every file below FOLDER into classes/ and exit without compiling",
    )
    parser.add_argument(
        "--compiler",
        type=Path,
        default=None,
        help="Path of the compiler binary (default: ../System/ucc.exe)",
    )
    parser.add_argument(
        "--strict-hooks",
        action="store_true",
        default=None,
        help="Fail the build when PreBuild.bat or PostBuild.bat exits nonzero",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not show progress bars",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write the log to this file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    parsed_args = parser.parse_args(argv)

    PathValidator.validate_workspace(parsed_args.workspace)

    try:
        settings = BuildSettings.from_environment(parsed_args.workspace.absolute())
    except UccMakeError as e:
        print(f"Error: {e}")
        sys.exit(EXIT_FAILURE)

    if parsed_args.compiler is not None:
        settings.compiler_path = parsed_args.compiler
    if parsed_args.strict_hooks is not None:
        settings.strict_hooks = parsed_args.strict_hooks
    if parsed_args.log_file is not None:
        settings.log_file = parsed_args.log_file
    settings.show_progress = not parsed_args.no_progress
    settings.verbose = parsed_args.verbose

    try:
        reporter = LoggingReporter(setup_logging(settings.verbose, settings.log_file))
    except OSError as e:
        print(f"Error: Cannot open log file {settings.log_file}: {e}")
        sys.exit(EXIT_FAILURE)

    try:
        if parsed_args.flattensource is not None:
            flatten_args = FlattenArgs(
                source_folder=parsed_args.flattensource,
                show_progress=settings.show_progress,
            )
            exit_code = flatten_command(settings, flatten_args, reporter)
        else:
            exit_code = build_command(settings, reporter)
    except KeyboardInterrupt:
        reporter.warn("Build interrupted")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        reporter.fatal(f"Unexpected error: {type(e).__name__}: {e}")
        if settings.verbose:
            import traceback

            print("Traceback:")
            print(traceback.format_exc())
        sys.exit(EXIT_FAILURE)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
