"""Fixture representation and discovery used by the test harness."""
from pathlib import Path
from typing import List, NamedTuple, Set

from golden_test.errors import MissingFixtureError


STREAM_SUFFIXES = {'stdout': '.out', 'stderr': '.err'}
STREAMS = ('stdout', 'stderr')


class Fixture(NamedTuple('Fixture', [('test_path', Path)])):
    """
    Represents a test case file that should be fed into the stdin of the
    program under test, together with the files holding the exact stdout and
    stderr the harness should expect from this. The expected files are named
    by appending '.out' and '.err' to the test case file name (so the expected
    stdout of 'tests/add.lox' is 'tests/add.lox.out').
    """
    @property
    def stdout_path(self) -> Path:
        """Returns the path to the expected stdout."""
        return self.expected_path('stdout')

    @property
    def stderr_path(self) -> Path:
        """Returns the path to the expected stderr."""
        return self.expected_path('stderr')

    def expected_path(self, stream: str) -> Path:
        """Returns the path to the expected output of stream."""
        return self.test_path.with_name(self.test_path.name +
                                        STREAM_SUFFIXES[stream])

    def expected(self, stream: str) -> bytes:
        """
        Returns the exact bytes expected on stream. Raises MissingFixtureError
        if the fixture file doesn't exist (an empty file means no output is
        expected).
        """
        path = self.expected_path(stream)

        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise MissingFixtureError([path]) from None


def discover_fixtures(directory: Path) -> List[Fixture]:
    """
    Retrieves a list of `Fixture`s from a directory (recursively). Every
    '*.out' or '*.err' file names a test case: the same path without that
    suffix. Files that have neither (ex. modules that tests import from the
    search path) are not test cases. Hidden files and directories are
    ignored.

    A test case is discovered if only one of its fixtures exists or even if
    the test case file itself is missing. These are most likely mistakes (ex.
    typos or files that weren't checked into git), so they are left for the
    harness to report instead of silently being skipped.
    """
    suffixes = set(STREAM_SUFFIXES.values())
    test_paths = set()  # type: Set[Path]

    for path in directory.glob('**/*'):
        if _is_hidden(path.relative_to(directory)):
            continue

        if path.suffix in suffixes and path.is_file():
            test_paths.add(path.with_suffix(''))

    return [Fixture(p) for p in sorted(test_paths)]


def _is_hidden(path: Path) -> bool:
    return any(part.startswith('.') for part in path.parts)
