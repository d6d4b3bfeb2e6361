"""
IMAP connection and operation management.

Wraps a single imaplib connection and exposes the UID-based operations the
guard needs. Server errors propagate to the caller; nothing is retried.
"""

import imaplib
import re
import socket
from typing import List, Optional, Sequence, Union

from .exceptions import InvalidArgument, TransportError

DELETED_FLAG = r"\Deleted"

_LIST_RE = re.compile(r'^\((?P<flags>[^)]*)\)\s+(?:"(?:[^"\\]|\\.)*"|NIL)\s+(?P<name>.*)$')
_ATOM_SPECIALS = re.compile(r'[\s(){%*"\\\]]')


def quote(token: str) -> str:
    """Quote a search token as an IMAP string when it is not a plain atom."""
    if token and not _ATOM_SPECIALS.search(token):
        return token
    escaped = token.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _unquote(name: str) -> str:
    name = name.strip()
    if len(name) >= 2 and name.startswith('"') and name.endswith('"'):
        return re.sub(r'\\(.)', r'\1', name[1:-1])
    return name


def parse_list_response(data: Sequence) -> List[str]:
    """Extract mailbox names from the data of a LIST response.

    Args:
        data: Response data as returned by ``imaplib.IMAP4.list``

    Returns:
        Mailbox names in server order
    """
    names = []
    for item in data:
        if item is None:
            continue
        if isinstance(item, tuple):
            # Literal form: (b'(\\HasNoChildren) "/" {11}', b'Mailbox "x"')
            names.append(item[1].decode("utf-8", errors="replace"))
            continue
        match = _LIST_RE.match(item.decode("utf-8", errors="replace"))
        if match:
            names.append(_unquote(match.group("name")))
    return names


class IMAPSession:
    """One authenticated IMAP connection addressed by message UID."""

    def __init__(self, conn: imaplib.IMAP4):
        """Initialize session.

        Args:
            conn: Connected imaplib client
        """
        self.conn = conn

    @classmethod
    def connect(cls, host: str, port: int, use_ssl: bool = True,
                timeout: Optional[float] = 30) -> "IMAPSession":
        """Open a new connection to the server.

        Args:
            host: IMAP server hostname
            port: IMAP server port
            use_ssl: Whether to connect over implicit TLS
            timeout: Socket timeout in seconds

        Returns:
            Unauthenticated session
        """
        if timeout is not None:
            socket.setdefaulttimeout(timeout)
        if use_ssl:
            return cls(imaplib.IMAP4_SSL(host, port))
        return cls(imaplib.IMAP4(host, port))

    def _check(self, command: str, typ: str, data) -> list:
        if typ != "OK":
            raise TransportError(f"{command} failed: {typ} {data!r}")
        return data

    def login(self, username: str, password: str) -> None:
        typ, data = self.conn.login(username, password)
        self._check("LOGIN", typ, data)

    def select(self, mailbox: str, readonly: bool = False) -> None:
        """Select a mailbox, using EXAMINE when readonly."""
        typ, data = self.conn.select(quote(mailbox), readonly=readonly)
        self._check("EXAMINE" if readonly else "SELECT", typ, data)

    def search(self, criteria: Union[Sequence[str], str]) -> List[int]:
        """Search the selected mailbox.

        Args:
            criteria: Search-key tokens, quoted here as needed, or one
                complete search string sent verbatim

        Returns:
            Matching UIDs in the order returned by the server

        Raises:
            InvalidArgument: If the criteria contain non-ASCII text, which
                imaplib cannot send without literals
        """
        if isinstance(criteria, str):
            args = [criteria or "ALL"]
        else:
            args = [quote(token) for token in criteria] or ["ALL"]
        for arg in args:
            if not arg.isascii():
                raise InvalidArgument(f"Search criteria must be ASCII: {arg!r}")
        typ, data = self.conn.uid("SEARCH", *args)
        self._check("SEARCH", typ, data)
        if not data or data[0] is None:
            return []
        return [int(uid) for uid in data[0].split()]

    def fetch_peek(self, uid: int) -> bytes:
        """Fetch a full message without setting the \\Seen flag."""
        typ, data = self.conn.uid("FETCH", str(uid), "(BODY.PEEK[])")
        self._check("FETCH", typ, data)
        for part in data:
            if isinstance(part, tuple):
                return part[1]
        raise TransportError(f"FETCH returned no body for UID {uid}")

    def add_flags(self, uid: int, flags: Sequence[str]) -> None:
        typ, data = self.conn.uid("STORE", str(uid), "+FLAGS", f"({' '.join(flags)})")
        self._check("STORE", typ, data)

    def mark_deleted(self, uid: int) -> None:
        self.add_flags(uid, [DELETED_FLAG])

    def copy(self, uid: int, mailbox: str) -> None:
        typ, data = self.conn.uid("COPY", str(uid), quote(mailbox))
        self._check("COPY", typ, data)

    def expunge(self) -> None:
        typ, data = self.conn.expunge()
        self._check("EXPUNGE", typ, data)

    def close(self) -> None:
        typ, data = self.conn.close()
        self._check("CLOSE", typ, data)

    def logout(self) -> None:
        self.conn.logout()

    def list_mailboxes(self) -> List[str]:
        """List all mailbox names visible to this session (unordered)."""
        typ, data = self.conn.list()
        self._check("LIST", typ, data)
        return parse_list_response(data)
