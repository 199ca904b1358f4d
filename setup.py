# pylint: disable=C0111,C0413,E0401,E0611
from os import chdir
from pathlib import Path
from subprocess import call
import sys

from setuptools import Command, setup


chdir(str((Path(__file__) / '..').resolve()))  # pylint: disable=E1101


class OptionlessCommand(Command):
    user_options = []  # type: list

    def initialize_options(self):
        pass

    def finalize_options(self):
        pass


TEST_ARGS = ['-m', 'unittest', 'discover', '-s', 'tests', '-t', '.']


class TestCommand(OptionlessCommand):
    description = 'runs the unit and integration tests'

    def run(self):  # pylint: disable=R0201
        sys.exit(call([sys.executable] + TEST_ARGS))


class CoverageCommand(OptionlessCommand):
    description = 'measures code coverage of the unit and integration tests'

    def run(self):  # pylint: disable=R0201
        self._call_or_exit('Coverage',
                           ['run', '--source=golden_test'] + TEST_ARGS)
        self._call_or_exit('Coverage report', ['report'])
        self._call_or_exit('Coverage html report', ['html', '-d', '.htmlcov'])

        uri = (Path(__file__) / '..' / '.htmlcov' / 'index.html').resolve() \
            .as_uri()
        print("\nView more detailed results at: {}".format(uri))

    def _call_or_exit(self, name, args):  # pylint: disable=R0201
        exit_code = call([sys.executable, '-m', 'coverage'] + args)

        if exit_code != 0:
            print("{} failed!".format(name), file=sys.stderr)
            sys.exit(exit_code)


with open(str(Path('golden_test') / 'version.py'), encoding='utf-8') as f:
    METADATA = {}  # type: dict
    exec(f.read(), METADATA)  # pylint: disable=W0122


setup(name='golden_test',
      version=METADATA['__version__'],
      description='Golden-file test harness for interpreters and other '
                  'text-in/text-out programs',
      author=METADATA['__author__'],
      author_email=METADATA['__email__'],
      packages=['golden_test'],
      python_requires='>=3.8',
      extras_require={
          'test': ['coverage', 'flake8<4', 'mypy', 'pylint<2.16'],
      },
      entry_points={
          'console_scripts': ['golden-test = golden_test.main:main'],
      },
      cmdclass={
          'test': TestCommand,
          'coverage': CoverageCommand,
      })
