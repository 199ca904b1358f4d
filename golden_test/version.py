__version__ = '1.0.0'
__author__ = 'golden_test contributors'
__email__ = 'golden-test@users.noreply.github.com'
