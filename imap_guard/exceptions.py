"""
Exception types raised by IMAP Guard.

Local validation errors are raised before any network activity. Errors from
the IMAP server are never retried here.
"""

import imaplib
from typing import Iterable


class InvalidArgument(ValueError):
    """An argument failed local validation."""


class ConfigurationError(InvalidArgument):
    """Settings are missing required keys or contain unknown ones."""

    def __init__(self, message: str, keys: Iterable[str] = ()):
        super().__init__(message)
        self.keys = list(keys)


class InvalidQueryError(InvalidArgument, TypeError):
    """A search query is neither a token sequence nor a single string."""


class TransportError(imaplib.IMAP4.error):
    """The IMAP server answered a command with a non-OK status."""


class NotConnectedError(RuntimeError):
    """A mailbox operation was attempted without an open session."""
