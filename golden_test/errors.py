"""Errors raised (and warnings issued) by the golden test harness."""

from pathlib import Path
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from golden_test.invoker import Mismatch  # noqa: F401


class HarnessError(Exception):
    """Base for all errors that make a test invocation fail."""


class MissingInputError(HarnessError):
    """The test case file to feed into the subject does not exist."""
    def __init__(self, test_path: Path) -> None:
        super().__init__("test file does not exist: {}".format(test_path))
        self.filename = test_path


class MissingFixtureError(HarnessError):
    """One or both of the expected output fixtures do not exist."""
    def __init__(self, fixture_paths: List[Path]) -> None:
        msg = "expected fixture file(s) missing:\n{}" \
            .format('\n'.join("  {}".format(p) for p in fixture_paths))
        super().__init__(msg)
        self.filenames = fixture_paths


class SubprocessLaunchError(HarnessError):
    """The subject program could not be started."""
    def __init__(self, cmd: str, error: OSError) -> None:
        super().__init__("unable to launch '{}': {}".format(cmd, error))
        self.cmd = cmd
        self.error = error


class SubprocessTimeoutError(HarnessError):
    """The subject program did not finish in time and was killed."""
    def __init__(self, cmd: str, timeout: float) -> None:
        super().__init__("'{}' timed out after {}s".format(cmd, timeout))
        self.cmd = cmd
        self.timeout = timeout


class MismatchError(HarnessError):
    """A captured stream differs from its expected fixture."""
    def __init__(self, mismatches: List['Mismatch']) -> None:
        super().__init__('\n\n'.join(m.describe() for m in mismatches))
        self.mismatches = mismatches


class CleanupWarning(UserWarning):
    """A scratch directory could not be removed after an invocation."""


class SignalInterrupt(KeyboardInterrupt):
    """
    A termination signal arrived while the harness was running. Like Ctrl-C,
    it stops the whole run (unittest only lets KeyboardInterrupts through), and
    the harness then exits with the conventional 128 + signum status.
    """
    def __init__(self, signum: int) -> None:
        super().__init__("interrupted by signal {}".format(signum))
        self.signum = signum

    @property
    def exit_status(self) -> int:
        """The exit status of a process killed by the signal."""
        return 128 + self.signum
