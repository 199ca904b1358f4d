"""
Wrapper around async subprocess that abstracts away a ProgramInvocation, which
when captured (run with a file as stdin and its stdout/stderr redirected into
files) produces a CapturedProgram.
"""

from asyncio import AbstractEventLoop, create_subprocess_exec, TimeoutError, wait_for  # noqa  # pylint: disable=W0622,C0301
from asyncio.subprocess import Process
from pathlib import Path
from typing import Awaitable, BinaryIO, List, NamedTuple, Optional, TypeVar

from golden_test.errors import SubprocessLaunchError, SubprocessTimeoutError
from golden_test.utils import join_cmd, relative_to_cwd


class ProgramInvocation:
    """Represents an invocation of some program with a file as its stdin."""

    def __init__(self, loop: AbstractEventLoop, command: List[str],
                 stdin: Path, timeout: Optional[float] = None) -> None:
        self._loop = loop
        self._command = command
        self._stdin = stdin
        self._timeout = timeout

    def capture(self, stdout_path: Path,
                stderr_path: Path) -> 'CapturedProgram':
        """
        Run the program to completion with its stdout written to stdout_path
        and its stderr written to stderr_path. Both files are closed (so, fully
        written) by the time this returns. The stdin file is streamed to the
        program, not read into memory.

        Raises SubprocessLaunchError if the program can't be started and
        SubprocessTimeoutError if it doesn't finish within the timeout (if
        there is one). If the program is still running when we give up on it
        (timeout, KeyboardInterrupt, etc.), it is killed first.
        """
        with self._stdin.open('rb') as stdin, \
                stdout_path.open('wb') as stdout, \
                stderr_path.open('wb') as stderr:
            process = self._launch(stdin, stdout, stderr)
            returncode = self._wait(process)

        return CapturedProgram(self.cmd, stdout_path, stderr_path, returncode)

    def _launch(self, stdin: BinaryIO, stdout: BinaryIO,
                stderr: BinaryIO) -> Process:
        async_process = create_subprocess_exec(*self._command, stdin=stdin,
                                               stdout=stdout, stderr=stderr)

        try:
            return self._loop.run_until_complete(async_process)
        except OSError as e:
            raise SubprocessLaunchError(self.cmd, e) from e

    def _wait(self, process: Process) -> int:
        try:
            return _run_async(self._loop, process.wait(),
                              timeout=self._timeout)
        except TimeoutError:
            assert self._timeout is not None
            self._kill(process)

            raise SubprocessTimeoutError(self.cmd, self._timeout) from None
        except BaseException:
            self._kill(process)
            raise

    def _kill(self, process: Process) -> None:
        """Kill process then wait for it to actually die."""
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass

        self._loop.run_until_complete(process.wait())

    @property
    def cmd(self) -> str:
        """The equivalent bash command of the invocation."""
        return "{} < {}".format(join_cmd(self._command),
                                join_cmd([relative_to_cwd(self._stdin)]))


class CapturedProgram(NamedTuple('CapturedProgram',
                                 [('cmd', str),
                                  ('stdout_path', Path),
                                  ('stderr_path', Path),
                                  ('returncode', int)])):
    """
    Represents the result of a program terminating with its output captured to
    files. The returncode is informational only.
    """
    @property
    def stdout(self) -> bytes:
        """The bytes the program wrote to stdout."""
        return self.stdout_path.read_bytes()

    @property
    def stderr(self) -> bytes:
        """The bytes the program wrote to stderr."""
        return self.stderr_path.read_bytes()

    def output(self, stream: str) -> bytes:
        """The bytes the program wrote to stream ('stdout' or 'stderr')."""
        return self.stdout if stream == 'stdout' else self.stderr


T = TypeVar('T')


def _run_async(loop: AbstractEventLoop, awaitable: Awaitable[T],
               timeout: Optional[float]) -> T:
    timed_awaitable = wait_for(awaitable, timeout=timeout)
    value = loop.run_until_complete(timed_awaitable)

    return value
