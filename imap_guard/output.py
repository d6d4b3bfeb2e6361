"""
Output sinks for verbose messages.

The guard writes informational lines through a sink chosen once from the
``verbose`` setting.
"""

import sys


class StdoutSink:
    """Writes to whatever ``sys.stdout`` currently is."""

    def write(self, text: str) -> int:
        return sys.stdout.write(text)

    def flush(self) -> None:
        sys.stdout.flush()


class NullSink:
    """Discards everything written to it."""

    def write(self, text: str) -> int:
        return 0

    def flush(self) -> None:
        pass


def make_sink(verbose: bool):
    """Return a stdout sink when verbose, otherwise a null sink."""
    return StdoutSink() if verbose else NullSink()
