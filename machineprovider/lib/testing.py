import io
import logging

from twisted.trial.unittest import TestCase as TrialTestCase


class TestCase(TrialTestCase):
    """
    Base class for all machineprovider tests.
    """

    # Default timeout for any test
    timeout = 5

    def capture_logging(self, name="", level=logging.INFO,
                        log_file=None, formatter=None):
        if log_file is None:
            log_file = io.StringIO()
        log_handler = logging.StreamHandler(log_file)
        if formatter:
            log_handler.setFormatter(formatter)
        logger = logging.getLogger(name)
        logger.addHandler(log_handler)
        old_logger_level = logger.level
        logger.setLevel(level)

        @self.addCleanup
        def reset_logging():
            logger.removeHandler(log_handler)
            logger.setLevel(old_logger_level)

        return log_file

    def assertInstance(self, instance, type):
        self.assertTrue(isinstance(instance, type))

    def assertLogLines(self, observed, expected):
        """Asserts that the lines of `expected` exist in order in the log."""
        remaining = list(expected)
        for line in observed.split("\n"):
            if remaining and remaining[0] in line:
                remaining.pop(0)

        self.assertFalse(
            remaining,
            "Did not see all expected lines in log, in order: %s, %s" % (
                observed, expected))
