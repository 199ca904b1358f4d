"""
The invoker runs the program under test against a single test case (in its
own scratch directory) and compares what it printed against the expected
fixtures.
"""

from asyncio import AbstractEventLoop, SelectorEventLoop, set_event_loop
from pathlib import Path
import sys
from types import TracebackType
from typing import ContextManager, List, NamedTuple, Optional, Sequence, \
    TextIO, Type, Union

from golden_test.errors import HarnessError, MismatchError, \
    MissingFixtureError, MissingInputError
from golden_test.fixtures import Fixture, STREAMS
from golden_test.subprocess import CapturedProgram, ProgramInvocation
from golden_test.utils import relative_to_cwd, scratch_directory, \
    unified_diff


SEARCH_PATH_FLAG = '-p'
DEFAULT_SEARCH_PATH = 'imports'


class Mismatch(NamedTuple('Mismatch', [('stream', str),
                                       ('expected_path', Path),
                                       ('expected', bytes),
                                       ('actual', bytes),
                                       ('diff', str)])):
    """A captured stream that differs from its expected fixture."""
    def describe(self) -> str:
        """Which stream was wrong and how (as a unified diff)."""
        return "wrong {}:\n{}".format(self.stream, self.diff)


class Verdict(NamedTuple('Verdict', [('test_path', Path),
                                     ('cmd', str),
                                     ('returncode', int),
                                     ('mismatches', List[Mismatch]),
                                     ('missing_fixtures', List[Path])])):
    """
    The outcome of one invocation. Only the captured streams decide whether
    the test passed; the returncode of the program under test is kept for
    reporting.
    """
    @property
    def passed(self) -> bool:
        """Indicates if both streams were exactly as expected."""
        return not self.mismatches and not self.missing_fixtures

    def check(self) -> None:
        """
        Raises MissingFixtureError if any fixture was missing, otherwise
        MismatchError if any stream was wrong.
        """
        if self.missing_fixtures:
            raise MissingFixtureError(self.missing_fixtures)
        if self.mismatches:
            raise MismatchError(self.mismatches)

    def describe(self) -> str:
        """A report of everything that was wrong (empty if it passed)."""
        problems = []  # type: List[str]

        if self.missing_fixtures:
            problems.append(str(MissingFixtureError(self.missing_fixtures)))

        problems.extend(m.describe() for m in self.mismatches)

        return '\n\n'.join(problems)


class Invoker(ContextManager['Invoker']):
    """
    Runs the program under test against test cases and checks its output.

    The subject is the command (executable and any leading arguments) of the
    program under test. It is invoked as `subject -p search_path` with the
    test case file as its stdin. If no search_path is given, the 'imports'
    directory beside each test case file is used.
    """

    def __init__(self, loop: AbstractEventLoop, subject: List[str],  # noqa  # pylint: disable=R0913
                 search_path: Optional[Path] = None,
                 timeout: Optional[float] = None,
                 color: bool = False) -> None:
        self._loop = loop
        self._subject = subject
        self._search_path = search_path
        self._timeout = timeout
        self._color = color

    @classmethod
    def create(cls, subject: List[str], search_path: Optional[Path] = None,
               timeout: Optional[float] = None,
               color: bool = False) -> 'Invoker':
        """
        Creates a new invoker for the program under test. The subject isn't
        checked here; if it can't be run, each run() raises
        SubprocessLaunchError.
        """
        loop = SelectorEventLoop()
        # NOTE: https://stackoverflow.com/q/49952817/568785
        set_event_loop(loop)

        return cls(loop, subject, search_path=search_path, timeout=timeout,
                   color=color)

    def invocation(self, fixture: Fixture) -> ProgramInvocation:
        """
        Returns the ProgramInvocation that feeds the fixture's test case file
        into the program under test.
        """
        search_path = self._search_path
        if search_path is None:
            search_path = fixture.test_path.parent / DEFAULT_SEARCH_PATH

        args = [*self._subject, SEARCH_PATH_FLAG, relative_to_cwd(search_path)]

        return ProgramInvocation(self._loop, args, fixture.test_path,
                                 timeout=self._timeout)

    def run(self, test_path: Path) -> Verdict:
        """
        Runs the program under test against the test case at test_path and
        compares its stdout and stderr against the expected fixtures.

        Raises MissingInputError (before anything is created or run) if the
        test case doesn't exist, and SubprocessLaunchError or
        SubprocessTimeoutError if the program couldn't be run. Mismatches and
        missing fixtures are reported in the returned Verdict. The scratch
        directory holding the captured output is always removed before this
        returns or raises.
        """
        if not test_path.is_file():
            raise MissingInputError(test_path)

        fixture = Fixture(test_path)
        invocation = self.invocation(fixture)

        with scratch_directory() as scratch:
            captured = invocation.capture(scratch / 'stdout',
                                          scratch / 'stderr')

            return self._compare(fixture, captured)

    def _compare(self, fixture: Fixture,
                 captured: CapturedProgram) -> Verdict:
        mismatches = []  # type: List[Mismatch]
        missing_fixtures = []  # type: List[Path]

        # Check both streams (even if the first is wrong), so every problem is
        # reported at once
        for stream in STREAMS:
            try:
                expected = fixture.expected(stream)
            except MissingFixtureError as e:
                missing_fixtures.extend(e.filenames)
                continue

            actual = captured.output(stream)
            if expected != actual:
                expected_path = fixture.expected_path(stream)
                diff = unified_diff(expected, actual,
                                    fromfile=relative_to_cwd(expected_path),
                                    tofile="actual_{}".format(stream),
                                    color=self._color)

                mismatches.append(Mismatch(stream, expected_path, expected,
                                           actual, diff))

        return Verdict(fixture.test_path, captured.cmd, captured.returncode,
                       mismatches, missing_fixtures)

    def __enter__(self) -> 'Invoker':
        return self

    def __exit__(self, _exc_type: Optional[Type[BaseException]],
                 _exc_value: Optional[BaseException],
                 _traceback: Optional[TracebackType]) -> None:
        try:
            self._loop.close()
        except RuntimeError:
            pass


def run(test_path: Path, subject_executable: Union[str, Sequence[str]],  # noqa  # pylint: disable=R0913
        search_path: Optional[Path] = None, timeout: Optional[float] = None,
        stream: Optional[TextIO] = None) -> int:
    """
    Runs one test case and returns the exit status for it: 0 if the program
    under test printed exactly the expected stdout and stderr, 1 otherwise.
    What went wrong is written to stream (default: stderr). Nothing is created
    (not even the event loop) for a test case that doesn't exist.
    """
    if stream is None:
        stream = sys.stderr

    if not test_path.is_file():
        print("{}: {}".format(relative_to_cwd(test_path),
                              MissingInputError(test_path)), file=stream)
        return 1

    if isinstance(subject_executable, str):
        subject = [subject_executable]
    else:
        subject = list(subject_executable)

    with Invoker.create(subject, search_path=search_path, timeout=timeout,
                        color=stream.isatty()) as invoker:
        try:
            verdict = invoker.run(test_path)
        except (HarnessError, OSError) as e:
            # OSErrors here are the harness's own (ex. no space for the
            # scratch directory or an unreadable test case)
            print("{}: {}".format(relative_to_cwd(test_path), e), file=stream)
            return 1

    if not verdict.passed:
        print("{}: failed while running: {}\n\n{}"
              .format(relative_to_cwd(test_path), verdict.cmd,
                      verdict.describe()), file=stream)
        return 1

    return 0
