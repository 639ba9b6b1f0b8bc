"""
Unit tests for BuildPipeline.

The process runner is replaced by a fake that replays scripted output, so
these tests cover sequencing and outcome decisions only.
"""

from pathlib import Path
from typing import Dict, List, Tuple
from unittest.mock import Mock

import pytest

from uccmake.build.artifact_backup import ArtifactBackupManager, BackupError
from uccmake.build.pipeline import (
    Aborted,
    BuildPipeline,
    CompileFailed,
    HookFailed,
    PipelineState,
    Succeeded,
)
from uccmake.build.process_runner import ProcessLaunchError
from uccmake.reporting import Reporter
from uccmake.workspace import WorkspacePaths


class FakeProcess:
    def __init__(self, lines: List[str], exit_code: int):
        self._lines = lines
        self._exit_code = exit_code
        self.exit_code = None

    def lines(self):
        yield from self._lines
        self.exit_code = self._exit_code

    def wait(self) -> int:
        self.exit_code = self._exit_code
        return self._exit_code


class FakeRunner:
    """Replays scripted output per executable name."""

    def __init__(self, scripts: Dict[str, Tuple[List[str], int]]):
        self.scripts = scripts
        self.calls: List[Tuple[Path, List[str], Path]] = []

    def start(self, executable, arguments, working_directory):
        self.calls.append((Path(executable), list(arguments), Path(working_directory)))
        name = Path(executable).name
        if name not in self.scripts:
            raise ProcessLaunchError(f"Failed to start {executable}")
        lines, exit_code = self.scripts[name]
        return FakeProcess(lines, exit_code)

    def started(self) -> List[str]:
        return [call[0].name for call in self.calls]


@pytest.fixture
def workspace(tmp_path):
    """Create a workspace with ucc.exe and make.ini in place."""
    module = tmp_path / "Wormhole"
    module.mkdir()
    (module / "make.ini").write_text("[Editor.EditorEngine]\nEditPackages=Wormhole\n")
    system = tmp_path / "System"
    system.mkdir()
    (system / "ucc.exe").write_text("")
    return module


@pytest.fixture
def paths(workspace):
    return WorkspacePaths.from_directory(workspace)


@pytest.fixture
def reporter():
    return Mock(spec=Reporter)


SUCCESS_OUTPUT = [
    "Analyzing...",
    "Wormhole.Wormhole : Warning, 'Foo' obscures 'Bar'",
    "Success - 0 error(s), 1 warning(s)",
]

FAILURE_OUTPUT = [
    "Wormhole.Wormhole : Error, Bad expression",
    "Compile aborted due to errors.",
    "Failure - 1 error(s), 0 warning(s)",
]


class TestBuildPipeline:
    """Test suite for BuildPipeline."""

    def test_compile_invocation(self, paths, reporter):
        runner = FakeRunner({"ucc.exe": (SUCCESS_OUTPUT, 0)})

        BuildPipeline(paths, reporter, runner=runner).run()

        executable, arguments, cwd = runner.calls[0]
        assert executable == paths.compiler_executable_path
        assert arguments == ["make", f"-ini={paths.configuration_file_path}"]
        assert cwd == paths.system_directory

    def test_success_runs_post_build(self, paths, reporter):
        paths.post_build_hook_path.write_text("copy")
        runner = FakeRunner({
            "ucc.exe": (SUCCESS_OUTPUT, 0),
            "PostBuild.bat": (["Copying Wormhole.u to C:\\UT\\System", "1 file(s) copied."], 0),
        })
        pipeline = BuildPipeline(paths, reporter, runner=runner)

        outcome = pipeline.run()

        assert outcome == Succeeded(error_count=0, warning_count=1)
        assert outcome.exit_code == 0
        assert runner.started() == ["ucc.exe", "PostBuild.bat"]
        assert runner.calls[1][2] == paths.workspace_directory
        assert pipeline.history == [
            PipelineState.IDLE,
            PipelineState.PRE_BUILD,
            PipelineState.BACKUP,
            PipelineState.COMPILING,
            PipelineState.SUCCEEDED,
            PipelineState.POST_BUILD,
            PipelineState.DONE,
        ]
        reporter.warn.assert_any_call("Wormhole.Wormhole : Warning, 'Foo' obscures 'Bar'")
        reporter.info.assert_any_call("Copying Wormhole.u to C:\\UT\\System")

    def test_failure_skips_post_build(self, paths, reporter):
        paths.post_build_hook_path.write_text("copy")
        runner = FakeRunner({
            "ucc.exe": (FAILURE_OUTPUT, 1),
            "PostBuild.bat": ([], 0),
        })
        pipeline = BuildPipeline(paths, reporter, runner=runner)

        outcome = pipeline.run()

        assert outcome == CompileFailed(error_count=1, warning_count=0, exit_code=1)
        assert runner.started() == ["ucc.exe"]
        assert pipeline.state is PipelineState.FAILED
        reporter.error.assert_any_call("Compile aborted due to errors.")

    def test_exit_code_is_authoritative(self, paths, reporter):
        runner = FakeRunner({"ucc.exe": (["Failure - 1 error(s), 0 warning(s)"], 0)})

        outcome = BuildPipeline(paths, reporter, runner=runner).run()

        assert isinstance(outcome, Succeeded)

    def test_counts_fall_back_to_diagnostics(self, paths, reporter):
        runner = FakeRunner({"ucc.exe": (["A : Warning, x", "B : Warning, y"], 0)})

        outcome = BuildPipeline(paths, reporter, runner=runner).run()

        assert outcome == Succeeded(error_count=0, warning_count=2)

    def test_missing_hooks_are_skipped(self, paths, reporter):
        runner = FakeRunner({"ucc.exe": (SUCCESS_OUTPUT, 0)})

        outcome = BuildPipeline(paths, reporter, runner=runner).run()

        assert isinstance(outcome, Succeeded)
        assert runner.started() == ["ucc.exe"]

    def test_pre_build_runs_before_backup(self, paths, reporter):
        paths.pre_build_hook_path.write_text("prepare")
        order = []
        runner = FakeRunner({"PreBuild.bat": ([], 0), "ucc.exe": ([], 0)})
        original_start = runner.start

        def start(executable, arguments, working_directory):
            order.append(Path(executable).name)
            return original_start(executable, arguments, working_directory)

        runner.start = start
        backup_manager = Mock(spec=ArtifactBackupManager)
        backup_manager.backup.side_effect = lambda *args: order.append("backup")

        BuildPipeline(paths, reporter, runner=runner, backup_manager=backup_manager).run()

        assert order == ["PreBuild.bat", "backup", "ucc.exe"]
        backup_manager.backup.assert_called_once_with(paths.artifact_path, paths.artifact_backup_path)

    def test_backup_failure_is_fatal(self, paths, reporter):
        runner = FakeRunner({"ucc.exe": ([], 0)})
        backup_manager = Mock(spec=ArtifactBackupManager)
        backup_manager.backup.side_effect = BackupError("in use")
        pipeline = BuildPipeline(paths, reporter, runner=runner, backup_manager=backup_manager)

        outcome = pipeline.run()

        assert outcome == Aborted(reason="in use")
        assert pipeline.state is PipelineState.FAILED
        assert runner.calls == []
        reporter.fatal.assert_called_once_with("in use")

    def test_missing_compiler_aborts(self, paths, reporter):
        paths.compiler_executable_path.unlink()
        paths.pre_build_hook_path.write_text("prepare")
        runner = FakeRunner({"PreBuild.bat": ([], 0), "ucc.exe": ([], 0)})
        pipeline = BuildPipeline(paths, reporter, runner=runner)

        outcome = pipeline.run()

        assert isinstance(outcome, Aborted)
        assert "Compiler not found" in outcome.reason
        assert outcome.exit_code == 1
        assert runner.calls == []
        assert pipeline.state is PipelineState.ABORTED

    def test_missing_configuration_aborts(self, paths, reporter):
        paths.configuration_file_path.unlink()
        runner = FakeRunner({"ucc.exe": ([], 0)})

        outcome = BuildPipeline(paths, reporter, runner=runner).run()

        assert isinstance(outcome, Aborted)
        assert "make.ini" in outcome.reason
        assert runner.calls == []

    def test_launch_failure_aborts(self, paths, reporter):
        outcome = BuildPipeline(paths, reporter, runner=FakeRunner({})).run()

        assert isinstance(outcome, Aborted)
        assert "Failed to start" in outcome.reason

    def test_classifier_fault_is_logged_and_build_continues(self, paths, reporter):
        runner = FakeRunner({"ucc.exe": (["Success - many error(s), 0 warning(s)", "done"], 0)})

        outcome = BuildPipeline(paths, reporter, runner=runner).run()

        assert isinstance(outcome, Succeeded)
        assert any("Malformed" in call.args[0] for call in reporter.error.call_args_list)
        reporter.info.assert_any_call("done")

    def test_post_build_failure_is_logged_by_default(self, paths, reporter):
        paths.post_build_hook_path.write_text("copy")
        runner = FakeRunner({"ucc.exe": (SUCCESS_OUTPUT, 0), "PostBuild.bat": ([], 2)})

        outcome = BuildPipeline(paths, reporter, runner=runner).run()

        assert isinstance(outcome, Succeeded)
        reporter.warn.assert_any_call("PostBuild.bat exited with code 2")

    def test_post_build_failure_with_strict_hooks(self, paths, reporter):
        paths.post_build_hook_path.write_text("copy")
        runner = FakeRunner({"ucc.exe": (SUCCESS_OUTPUT, 0), "PostBuild.bat": ([], 2)})

        outcome = BuildPipeline(paths, reporter, runner=runner, strict_hooks=True).run()

        assert outcome == HookFailed(hook="PostBuild.bat", hook_exit_code=2)
        assert outcome.exit_code == 1

    def test_pre_build_failure_with_strict_hooks_stops_build(self, paths, reporter):
        paths.pre_build_hook_path.write_text("prepare")
        runner = FakeRunner({"PreBuild.bat": ([], 1), "ucc.exe": ([], 0)})

        outcome = BuildPipeline(paths, reporter, runner=runner, strict_hooks=True).run()

        assert outcome == HookFailed(hook="PreBuild.bat", hook_exit_code=1)
        assert runner.started() == ["PreBuild.bat"]

    @pytest.mark.parametrize("strict_hooks", [False, True])
    def test_post_build_launch_failure_aborts(self, paths, reporter, strict_hooks):
        paths.post_build_hook_path.write_text("copy")
        runner = FakeRunner({"ucc.exe": (SUCCESS_OUTPUT, 0)})
        pipeline = BuildPipeline(paths, reporter, runner=runner, strict_hooks=strict_hooks)

        outcome = pipeline.run()

        assert outcome == Aborted(reason=f"Failed to start {paths.post_build_hook_path}")
        assert pipeline.state is PipelineState.ABORTED
        reporter.fatal.assert_called_once_with(f"Failed to start {paths.post_build_hook_path}")

    @pytest.mark.parametrize("strict_hooks", [False, True])
    def test_pre_build_launch_failure_aborts_before_backup(self, paths, reporter, strict_hooks):
        paths.pre_build_hook_path.write_text("prepare")
        runner = FakeRunner({"ucc.exe": (SUCCESS_OUTPUT, 0)})
        backup_manager = Mock(spec=ArtifactBackupManager)
        pipeline = BuildPipeline(
            paths, reporter, runner=runner, backup_manager=backup_manager, strict_hooks=strict_hooks
        )

        outcome = pipeline.run()

        assert outcome == Aborted(reason=f"Failed to start {paths.pre_build_hook_path}")
        assert runner.started() == ["PreBuild.bat"]
        backup_manager.backup.assert_not_called()
        assert pipeline.history[-2:] == [PipelineState.PRE_BUILD, PipelineState.ABORTED]

    def test_output_lines_are_logged_verbatim(self, paths, reporter):
        runner = FakeRunner({
            "ucc.exe": ([
                "  Wormhole.Wormhole : Error, expected ';' : got ')'",
                "Parsing: Error, no source attached",
                "Success - 0 error(s), 0 warning(s)",
            ], 0),
        })

        BuildPipeline(paths, reporter, runner=runner).run()

        reporter.error.assert_any_call("  Wormhole.Wormhole : Error, expected ';' : got ')'")
        reporter.error.assert_any_call("Parsing: Error, no source attached")
        reporter.info.assert_any_call("Success - 0 error(s), 0 warning(s)")
