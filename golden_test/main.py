"""Main entry point for the golden test harness."""

from argparse import ArgumentParser, ArgumentTypeError, Namespace
from itertools import chain
from os import environ
from pathlib import Path
from shlex import split as shell_split
from signal import SIGHUP, SIGTERM
import sys
from typing import List, Optional
from unittest import TestSuite, TextTestRunner

from golden_test.errors import SignalInterrupt
from golden_test.fixtures import discover_fixtures, Fixture
from golden_test.golden_test_case import GoldenTestCase
from golden_test.invoker import Invoker
from golden_test.utils import interrupt_on


DEFAULT_SUBJECT = './interpreter'
SUBJECT_ENV_VAR = 'GOLDEN_SUBJECT'


def main(args: Optional[List[str]] = None) -> None:
    """
    Main entry point for the golden test harness. Exits with status 0 if every
    test case passed and 1 otherwise. A SIGTERM or SIGHUP stops the run (after
    cleaning up) with the usual 128 + signum status.
    """
    parsed = _get_args(args)
    fixtures = list(chain.from_iterable(parsed.tests))

    # SIGINT already raises KeyboardInterrupt; these need the same treatment
    # so that no scratch directory outlives a terminated harness
    try:
        with interrupt_on(SIGTERM, SIGHUP):
            with Invoker.create(parsed.subject,
                                search_path=parsed.search_path,
                                timeout=parsed.timeout,
                                color=parsed.color) as invoker:
                test_runner = TextTestRunner(verbosity=parsed.verbosity)
                test_suite = TestSuite([GoldenTestCase(invoker, fixture)
                                        for fixture in fixtures])

                result = test_runner.run(test_suite)
    except SignalInterrupt as e:
        print(e, file=sys.stderr)
        sys.exit(e.exit_status)

    sys.exit(0 if result.wasSuccessful() else 1)


def _get_args(args: Optional[List[str]] = None) -> Namespace:
    parser = ArgumentParser(description='a golden-file test harness: feeds '
                                        'each test case into the program '
                                        'under test and compares its stdout '
                                        'and stderr byte-for-byte against '
                                        'TEST.out and TEST.err')

    parser.add_argument('--subject', type=_parse_subject,
                        default=environ.get(SUBJECT_ENV_VAR, DEFAULT_SUBJECT),
                        help="command that runs the program under test "
                             "(default: ${} or {})"
                             .format(SUBJECT_ENV_VAR, DEFAULT_SUBJECT))

    parser.add_argument('-p', '--search-path', dest='search_path', type=Path,
                        default=None,
                        help='search path passed to the program under test '
                             'as -p (default: the imports/ directory beside '
                             'each test case)')

    parser.add_argument('--timeout', type=_parse_timeout, default=None,
                        help='seconds to wait for the program under test '
                             'before killing it (default: wait forever)')

    color = parser.add_mutually_exclusive_group()
    color.add_argument('--color', dest='color', action='store_const',
                       const=True, help='always color diffs')
    color.add_argument('--no-color', dest='color', action='store_const',
                       const=False, help='never color diffs')
    parser.set_defaults(color=sys.stderr.isatty())

    parser.add_argument('-v', dest='verbosity', action='store_const', const=2,
                        default=1, help='verbose test output')

    parser.add_argument('tests', type=_parse_tests, nargs='+',
                        metavar='TEST',
                        help='test case file (or directory of test cases) '
                             'to run')

    return parser.parse_args(args)


def _parse_subject(command: str) -> List[str]:
    subject = shell_split(command)

    if not subject:
        raise ArgumentTypeError('subject command is empty')

    return subject


def _parse_timeout(value: str) -> float:
    try:
        timeout = float(value)
    except ValueError:
        raise ArgumentTypeError("invalid timeout: {}".format(repr(value))) \
            from None

    if timeout <= 0:
        raise ArgumentTypeError("timeout must be positive: {}".format(value))

    return timeout


def _parse_tests(path: str) -> List[Fixture]:
    test_path = Path(path)

    if test_path.is_dir():
        fixtures = discover_fixtures(test_path)
        if not fixtures:
            raise ArgumentTypeError("no test cases (*.out or *.err files) "
                                    "found in: {}".format(path))

        return fixtures

    if not test_path.exists():
        raise ArgumentTypeError("test file does not exist: {}".format(path))

    return [Fixture(test_path)]


if __name__ == '__main__':
    main()
