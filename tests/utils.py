from contextlib import contextmanager
from pathlib import Path
from shutil import rmtree
import sys
import tempfile


DUMMY_INTERPRETER = (Path(__file__) / '..' / 'golden_test' /
                     'dummy_interpreter.py').resolve()
DUMMY_SUBJECT = [sys.executable, str(DUMMY_INTERPRETER)]


@contextmanager
def golden_directory():
    """A temporary directory (removed afterwards) to write test cases into."""
    directory = Path(tempfile.mkdtemp(prefix='golden_test-tests-'))

    try:
        yield directory
    finally:
        rmtree(str(directory))


def write_test_case(directory, name, source, stdout=None, stderr=None):
    """
    Writes a test case named name into directory, along with its expected
    stdout (name.out) and stderr (name.err) fixtures unless they are None.
    Strings are written as UTF-8. Returns the path to the test case.
    """
    test_path = directory / name
    test_path.parent.mkdir(parents=True, exist_ok=True)
    _write(test_path, source)

    if stdout is not None:
        _write(directory / (name + '.out'), stdout)
    if stderr is not None:
        _write(directory / (name + '.err'), stderr)

    return test_path


def _write(path, contents):
    if isinstance(contents, str):
        contents = contents.encode('utf-8')

    path.write_bytes(contents)


class ScratchRecorder:
    """
    Records every directory created by golden_test.utils.mkdtemp (patch it
    with this as the side_effect), so tests can check they were removed.
    """
    def __init__(self):
        self.directories = []

    def __call__(self, *args, **kwargs):
        path = tempfile.mkdtemp(*args, **kwargs)
        self.directories.append(Path(path))
        return path

    def remaining(self):
        return [d for d in self.directories if d.exists()]
