"""
Mailbox guard: rule-driven move and delete of IMAP messages.

A Guard owns one IMAP session. It searches the selected mailbox, optionally
fetches each match for a filter, acts on it, and expunges when done.
"""

from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from .config import GuardSettings, build_settings
from .exceptions import InvalidQueryError, NotConnectedError
from .imap_manager import IMAPSession
from .message import ParsedMessage, parse_message
from .output import make_sink
from .query import Query

QueryLike = Union[Query, Sequence[str], str]
Filter = Callable[[ParsedMessage], Any]

_NOT_CONNECTED = "Not logged in; call login() first"


class Guard:
    """Processes mailboxes according to search queries and filters."""

    def __init__(self, settings: Union[GuardSettings, Mapping[str, Any]],
                 connect: Callable[..., IMAPSession] = IMAPSession.connect):
        """Initialize guard.

        Args:
            settings: Connection settings, validated and frozen here
            connect: Factory opening an unauthenticated session from
                (host, port)

        Raises:
            ConfigurationError: If settings are missing required keys or
                contain unknown ones
        """
        self.settings = build_settings(settings)
        self.verbose = make_sink(self.settings.verbose)
        self.mailbox: Optional[str] = None
        # Fetched messages are passed to this callable if set
        self.debug: Optional[Callable[[ParsedMessage], Any]] = None
        self._connect = connect
        self._session: Optional[IMAPSession] = None

        if self.settings.read_only:
            print("DRY-RUN MODE ENABLED")

    def __enter__(self) -> "Guard":
        self.login()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._session is not None:
            self.disconnect()

    @property
    def session(self) -> IMAPSession:
        if self._session is None:
            raise NotConnectedError(_NOT_CONNECTED)
        return self._session

    def login(self) -> None:
        """Authenticate to the configured IMAP server."""
        session = self._connect(self.settings.host, self.settings.port)
        session.login(self.settings.username, self.settings.password)
        self._session = session
        self.verbose.write("Logged in successfully\n")

    def select(self, mailbox: str) -> None:
        """Select a mailbox, read-only when in dry-run mode."""
        self.session.select(mailbox, readonly=self.settings.read_only)
        self.mailbox = mailbox

    def list(self) -> List[str]:
        """Return the sorted names of all mailboxes."""
        return sorted(self.session.list_mailboxes())

    def move(self, query: QueryLike, mailbox: str, filter: Optional[Filter] = None) -> None:
        """Move messages matching the query and filter.

        Args:
            query: IMAP query
            mailbox: Destination mailbox
            filter: Optional callable receiving each ParsedMessage
        """
        def operation(message_id: int) -> str:
            if not self.settings.read_only:
                self.session.copy(message_id, mailbox)
                self.session.mark_deleted(message_id)
            return f"moved to {mailbox}"

        self._process(query, operation, filter)

    def delete(self, query: QueryLike, filter: Optional[Filter] = None) -> None:
        """Delete messages matching the query and filter.

        Args:
            query: IMAP query
            filter: Optional callable receiving each ParsedMessage
        """
        def operation(message_id: int) -> str:
            if not self.settings.read_only:
                self.session.mark_deleted(message_id)
            return "deleted"

        self._process(query, operation, filter)

    def each(self, query: QueryLike, callback: Callable[[int], Any]) -> None:
        """Call ``callback(uid)`` for every message matching the query."""
        def operation(message_id: int) -> str:
            result = callback(message_id)
            return result if isinstance(result, str) else "processed"

        self._process(query, operation)

    def fetch_message(self, message_id: int) -> ParsedMessage:
        """Fetch and parse a message by UID.

        Uses ``BODY.PEEK[]`` so the \\Seen flag is left untouched.
        """
        return parse_message(self.session.fetch_peek(message_id))

    def expunge(self) -> None:
        """Permanently remove messages flagged \\Deleted from the selected mailbox."""
        if not self.settings.read_only:
            self.session.expunge()

    def close(self) -> None:
        """Close the selected mailbox, removing messages flagged \\Deleted."""
        if not self.settings.read_only:
            self.session.close()

    def disconnect(self) -> None:
        """Log out and drop the session."""
        session, self._session = self.session, None
        self.mailbox = None
        session.logout()

    def _process(self, query: QueryLike, operation: Callable[[int], str],
                 filter: Optional[Filter] = None) -> None:
        criteria = self._validate_query(query)
        if self._session is None:
            raise NotConnectedError(_NOT_CONNECTED)

        try:
            message_ids = self._search(criteria)
            count = len(message_ids)

            for index, message_id in enumerate(message_ids, 1):
                print(f"Processing UID {message_id} ({index}/{count}): ", end="")

                result: Any = True
                if filter is not None or self.debug is not None:
                    message = self.fetch_message(message_id)

                    if self.debug is not None:
                        self.debug(message)

                    if filter is not None:
                        result = filter(message)
                        self.verbose.write(f"(given filter result: {result!r}) ")

                print(operation(message_id) if result else "ignored")
        finally:
            self.expunge()

    def _validate_query(self, query: QueryLike) -> Union[List[str], str]:
        if isinstance(query, Query):
            return query.render()
        if isinstance(query, str):
            return query
        if isinstance(query, (list, tuple)) and all(isinstance(token, str) for token in query):
            return list(query)
        raise InvalidQueryError(
            "Query must be either a string holding the entire search string, "
            "or a single-dimension sequence of search keywords and arguments."
        )

    def _search(self, criteria: Union[List[str], str]) -> List[int]:
        message_ids = self.session.search(criteria)
        print(f"Query on {self.mailbox}: {criteria!r}: {len(message_ids)} results")
        return message_ids
