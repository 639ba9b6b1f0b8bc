"""
External process execution with streamed output.

The compiler and the hook scripts are run with stdout captured (stderr merged
into it) and their output is handed to the caller one line at a time as it
is produced. Reading blocks until the child closes its output; there is no
timeout.

Design:
    - ProcessRunner.start() launches the process and returns a RunningProcess
    - RunningProcess.lines() yields lines until the stream closes, then
      waits for the exit code
    - Ctrl-C while streaming terminates the whole child process tree
"""

import os
import shlex
import subprocess
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

import psutil

from ..errors import UccMakeError

Arguments = Union[str, Sequence[str]]


class ProcessLaunchError(UccMakeError):
    """Raised when a process cannot be started."""
    pass


def split_arguments(arguments: Arguments) -> List[str]:
    """Split an argument string the way the current platform's shell would."""
    if isinstance(arguments, str):
        return shlex.split(arguments, posix=os.name != "nt")
    return list(arguments)


def terminate_process_tree(pid: int, timeout: float = 3.0) -> int:
    """Terminate a process and all of its children.

    Children are terminated before their parent; anything still alive after
    the timeout is killed.

    Args:
        pid: PID of the root process
        timeout: Seconds to wait for graceful termination

    Returns:
        Number of processes signalled
    """
    try:
        root = psutil.Process(pid)
        processes = root.children(recursive=True)
    except psutil.NoSuchProcess:
        return 0
    processes.reverse()
    processes.append(root)

    terminated: List[psutil.Process] = []
    for proc in processes:
        try:
            proc.terminate()
            terminated.append(proc)
        except psutil.NoSuchProcess:
            pass  # Already dead

    _gone, alive = psutil.wait_procs(terminated, timeout=timeout)
    for proc in alive:
        try:
            proc.kill()
        except psutil.NoSuchProcess:
            pass

    return len(terminated)


class RunningProcess:
    """A started child process whose output has not been consumed yet."""

    def __init__(self, process: subprocess.Popen, command: List[str]):
        self._process = process
        self.command = command
        self.exit_code: Optional[int] = None

    @property
    def pid(self) -> int:
        return self._process.pid

    def lines(self) -> Iterator[str]:
        """
        Yield output lines, without line terminators, as they arrive.

        The iterator ends when the child closes its output. The exit code is
        available in `exit_code` afterwards.
        """
        stream = self._process.stdout
        try:
            if stream is not None and not stream.closed:
                for raw_line in stream:
                    yield raw_line.rstrip("\r\n")
        except KeyboardInterrupt:
            terminate_process_tree(self._process.pid)
            raise
        finally:
            if stream is not None:
                stream.close()
        self.exit_code = self._process.wait()

    def wait(self) -> int:
        """Consume any remaining output and return the exit code."""
        if self.exit_code is None:
            for _line in self.lines():
                pass
        return self.exit_code


class ProcessRunner:
    """Launches external executables with captured output."""

    def start(self, executable: Path, arguments: Arguments, working_directory: Path) -> RunningProcess:
        """
        Launch an executable.

        Args:
            executable: Path of the program to run
            arguments: Argument list, or a single string split with shell rules
            working_directory: Working directory of the child

        Returns:
            RunningProcess streaming the child's output

        Raises:
            ProcessLaunchError: If the process cannot be started
        """
        command = [str(executable)] + split_arguments(arguments)
        try:
            process = subprocess.Popen(
                command,
                cwd=str(working_directory),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise ProcessLaunchError(f"Failed to start {executable}: {e}") from e

        return RunningProcess(process, command)
