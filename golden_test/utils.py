"""Utilities for the test harness."""

from contextlib import contextmanager
from difflib import diff_bytes, unified_diff as _unified_diff
from pathlib import Path
from shlex import quote as shell_quote
from shutil import rmtree
from signal import signal
from tempfile import mkdtemp
from types import FrameType
from typing import Any, Dict, Generator, Iterable, Iterator, List, \
    Optional
from warnings import warn

from golden_test.errors import CleanupWarning, SignalInterrupt


NO_NEWLINE_MARKER = b'\n\\ No newline at end of file\n'


@contextmanager
def assertion_context(context: str) -> Generator[None, None, None]:
    """
    Helper context that prepends all AssertionErrors encountered within the
    context with some prefix string. Useful in tests to add the same context
    information to many assertions.
    """
    try:
        yield
    except AssertionError as e:
        e.args = ("{}{}".format(context, e.args[0]),)
        raise


@contextmanager
def scratch_directory(prefix: str = 'golden_test-') -> Iterator[Path]:
    """
    Creates a fresh, uniquely named temporary directory and removes it (and
    everything in it) when the context exits, however it exits. A failure to
    remove the directory is reported as a CleanupWarning and never replaces
    the outcome of the context body.
    """
    path = Path(mkdtemp(prefix=prefix))

    try:
        yield path
    finally:
        try:
            rmtree(str(path))
        except OSError as e:
            warn("unable to remove scratch directory {}: {}".format(path, e),
                 CleanupWarning)


@contextmanager
def interrupt_on(*signums: int) -> Iterator[None]:
    """
    Turns delivery of any of the given signals into a SignalInterrupt for the
    duration of the context, so that pending finally blocks and context exits
    still run and unittest stops the run instead of recording an error.
    Previous handlers are restored afterwards. Must be used from the main
    thread.
    """
    def _raise_interrupt(signum: int, _: Optional[FrameType]) -> None:
        raise SignalInterrupt(signum)

    previous = {}  # type: Dict[int, Any]
    for signum in signums:
        previous[signum] = signal(signum, _raise_interrupt)

    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal(signum, handler)


def unified_diff(a: bytes, b: bytes,  # pylint: disable=C0103
                 fromfile: str = '', tofile: str = '',
                 color: bool = False) -> str:
    """
    Performs a byte-exact unified diff of a and b (with optional filenames
    fromfile and tofile, respectively). A last line lacking its newline is
    marked as such, so a missing trailing newline shows up in the diff. Bytes
    that aren't valid UTF-8 are shown as backslash escapes. If `color` is True,
    the returned diff is colored using ANSI terminal colors.
    """
    a_lines = _diff_lines(a)
    b_lines = _diff_lines(b)

    diff = diff_bytes(_unified_diff, a_lines, b_lines,
                      fromfile=fromfile.encode('utf-8'),
                      tofile=tofile.encode('utf-8'))

    lines = (line.decode('utf-8', 'backslashreplace')
             for line in diff)  # type: Iterable[str]

    if color:
        lines = map(_color_diff_line, lines)

    return ''.join(lines)


def _diff_lines(data: bytes) -> List[bytes]:
    lines = data.splitlines(keepends=True)

    if lines and not lines[-1].endswith(b'\n'):
        lines[-1] += NO_NEWLINE_MARKER

    return lines


def _color_diff_line(line: str) -> str:
    if line[0] == '+':
        return _green(line)
    if line[0] == '-':
        return _red(line)
    if line[0] == '@':
        return _blue(line)

    return line


def _green(text: str) -> str:
    return "\033[1;32m{}\033[0;0m".format(text)


def _red(text: str) -> str:
    return "\033[1;31m{}\033[0;0m".format(text)


def _blue(text: str) -> str:
    return "\033[1;34m{}\033[0;0m".format(text)


def relative_to_cwd(path: Path) -> str:
    """Returns a path relative to the CWD (or unchanged if outside of it)."""
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


def join_cmd(args: List[str]) -> str:
    """Joins a list of command line args into a well-formed command."""
    return ' '.join(map(shell_quote, args))
