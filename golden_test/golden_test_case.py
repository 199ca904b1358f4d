"""unittest TestCase that runs one golden test case through an Invoker."""

# pylint: disable=C0103
from unittest import TestCase

from golden_test.errors import HarnessError
from golden_test.fixtures import Fixture
from golden_test.invoker import Invoker, Verdict
from golden_test.utils import assertion_context, relative_to_cwd


class GoldenTestCase(TestCase):
    """
    A TestCase for a single fixture. It passes only if the program under test
    prints exactly the expected stdout and stderr for the fixture's test case.
    """

    def __init__(self, invoker: Invoker, fixture: Fixture,
                 name: str = 'runTest') -> None:
        super().__init__(name)

        self.invoker = invoker
        self.fixture = fixture

    def runTest(self) -> None:
        """Runs the fixture's test case and asserts its verdict."""
        try:
            verdict = self.invoker.run(self.fixture.test_path)
        except HarnessError as e:
            self.fail(str(e))

        self.assertVerdict(verdict)

    def assertVerdict(self, verdict: Verdict) -> None:
        """
        Asserts that the verdict passed. On failure, the message includes
        what was wrong with each stream (a unified diff against the expected
        fixture) and which fixtures were missing.
        """
        # Wrap assertion errors in the exact command to invoke
        # (that can be copied and pasted) for convenience
        with assertion_context("while running: {}\n(exited with {})\n\n"
                               .format(verdict.cmd, verdict.returncode)):
            if not verdict.passed:
                self.fail(verdict.describe())

    def id(self) -> str:
        return relative_to_cwd(self.fixture.test_path)

    def __str__(self) -> str:
        return self.id()
