"""
IMAP Guard Package

Rule-driven mailbox cleanup on top of IMAP: build search queries fluently,
then move or delete the matching messages.
"""

__version__ = "1.0.0"

from .config import ConfigManager, GuardSettings, build_settings
from .exceptions import (
    ConfigurationError,
    InvalidArgument,
    InvalidQueryError,
    NotConnectedError,
    TransportError,
)
from .guard import Guard
from .imap_manager import IMAPSession
from .message import ParsedMessage, parse_message
from .query import CalendarDate, DaysAgo, Query, RawDate

__all__ = [
    "CalendarDate",
    "ConfigManager",
    "ConfigurationError",
    "DaysAgo",
    "Guard",
    "GuardSettings",
    "IMAPSession",
    "InvalidArgument",
    "InvalidQueryError",
    "NotConnectedError",
    "ParsedMessage",
    "Query",
    "RawDate",
    "TransportError",
    "build_settings",
    "parse_message",
]
