"""
Progress reporting for the training pipeline.

Every stage takes a ``reporter`` and talks to it instead of printing, so the
caller decides where messages and progress bars go:
 - ConsoleReporter: "ihog: ..." lines and tqdm bars on the terminal
 - NullReporter: silent
"""

from tqdm import tqdm


class ConsoleReporter:
    def __init__(self, prefix="ihog", bars=True):
        self.prefix = prefix
        self.bars = bars

    def message(self, msg):
        tqdm.write(f"{self.prefix}: {msg}")

    def warning(self, msg):
        tqdm.write(f"{self.prefix}: warning: {msg}")

    def progress(self, iterable, desc=None, total=None):
        """Wrap an iterable so that iterating it advances a progress bar."""
        return tqdm(iterable, desc=desc, total=total, leave=False, disable=not self.bars)


class NullReporter(ConsoleReporter):
    def message(self, msg):
        pass

    def warning(self, msg):
        pass

    def progress(self, iterable, desc=None, total=None):
        return iterable


def get_reporter(reporter=None):
    return ConsoleReporter() if reporter is None else reporter
