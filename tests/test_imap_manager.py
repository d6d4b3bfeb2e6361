"""
Tests for the imaplib-backed IMAPSession.
"""

import imaplib

import pytest

from conftest import FakeIMAP, RAW_MESSAGE
from imap_guard import InvalidArgument, TransportError
from imap_guard.imap_manager import IMAPSession, parse_list_response, quote


@pytest.mark.parametrize("token, expected", [
    ("SEEN", "SEEN"),
    ("18-Mar-2013", "18-Mar-2013"),
    ("github.com", "github.com"),
    ("monit alert -- ", '"monit alert -- "'),
    ('say "hi"', '"say \\"hi\\""'),
    ("back\\slash", '"back\\\\slash"'),
    ("", '""'),
])
def test_quote(token, expected):
    assert quote(token) == expected


def test_search_quotes_tokens():
    conn = FakeIMAP({"SEARCH": ("OK", [b"7 28"])})

    uids = IMAPSession(conn).search(["SUBJECT", "CRON-APT completed on ", "SEEN"])

    assert uids == [7, 28]
    assert conn.calls == [("UID", "SEARCH", "SUBJECT", '"CRON-APT completed on "', "SEEN")]


def test_search_string_is_verbatim():
    conn = FakeIMAP({"SEARCH": ("OK", [b"28 7"])})

    assert IMAPSession(conn).search('SUBJECT "a b"') == [28, 7]
    assert conn.calls == [("UID", "SEARCH", 'SUBJECT "a b"')]


def test_empty_search_means_all():
    conn = FakeIMAP({"SEARCH": ("OK", [b""])})
    session = IMAPSession(conn)

    assert session.search([]) == []
    assert session.search("") == []
    assert conn.calls == [("UID", "SEARCH", "ALL"), ("UID", "SEARCH", "ALL")]


def test_search_failure_raises():
    conn = FakeIMAP({"SEARCH": ("NO", [b"mailbox not selected"])})

    with pytest.raises(TransportError, match="SEARCH"):
        IMAPSession(conn).search(["ALL"])


def test_non_ascii_search_is_rejected_before_sending():
    conn = FakeIMAP({"SEARCH": ("OK", [b"1"])})
    session = IMAPSession(conn)

    with pytest.raises(InvalidArgument, match="ASCII"):
        session.search(["SUBJECT", "Grüße"])
    with pytest.raises(InvalidArgument):
        session.search("SUBJECT Grüße")
    assert conn.calls == []


def test_transport_error_is_an_imap_error():
    assert issubclass(TransportError, imaplib.IMAP4.error)


def test_fetch_peek_does_not_set_seen():
    conn = FakeIMAP({"FETCH": ("OK", [(b"1 (UID 7 BODY[] {150}", RAW_MESSAGE), b")"])})

    assert IMAPSession(conn).fetch_peek(7) == RAW_MESSAGE
    assert conn.calls == [("UID", "FETCH", "7", "(BODY.PEEK[])")]


def test_fetch_without_body_raises():
    conn = FakeIMAP({"FETCH": ("OK", [None])})

    with pytest.raises(TransportError):
        IMAPSession(conn).fetch_peek(7)


def test_copy_and_mark_deleted():
    conn = FakeIMAP()
    session = IMAPSession(conn)

    session.copy(7, "INBOX.Github")
    session.mark_deleted(7)
    session.copy(28, "Old Mail")

    assert conn.calls == [
        ("UID", "COPY", "7", "INBOX.Github"),
        ("UID", "STORE", "7", "+FLAGS", r"(\Deleted)"),
        ("UID", "COPY", "28", '"Old Mail"'),
    ]


def test_select_and_examine():
    conn = FakeIMAP()
    session = IMAPSession(conn)

    session.select("INBOX")
    session.select("Sent Items", readonly=True)

    assert conn.calls == [("SELECT", "INBOX", False), ("SELECT", '"Sent Items"', True)]


def test_select_failure_raises():
    conn = FakeIMAP({"SELECT": ("NO", [b"no such mailbox"])})

    with pytest.raises(TransportError, match="EXAMINE"):
        IMAPSession(conn).select("Missing", readonly=True)


def test_expunge_close_logout():
    conn = FakeIMAP()
    session = IMAPSession(conn)

    session.expunge()
    session.close()
    session.logout()

    assert conn.calls == [("EXPUNGE",), ("CLOSE",), ("LOGOUT",)]


def test_parse_list_response():
    data = [
        b'(\\HasNoChildren) "/" "INBOX"',
        b'(\\HasChildren \\Noselect) "." INBOX.Ops',
        b'(\\HasNoChildren) NIL "Sent \\"Items\\""',
        (b'(\\HasNoChildren) "/" {9}', b"Caf\xc3\xa9 Box"),
        None,
    ]

    assert parse_list_response(data) == ["INBOX", "INBOX.Ops", 'Sent "Items"', "Café Box"]


def test_list_mailboxes():
    conn = FakeIMAP({"LIST": ("OK", [b'(\\HasNoChildren) "/" "Trash"', b'(\\HasNoChildren) "/" "Archive"'])})

    assert IMAPSession(conn).list_mailboxes() == ["Trash", "Archive"]


def test_connect_plain(monkeypatch):
    opened = []

    class Plain:
        def __init__(self, host, port):
            opened.append((host, port))

    monkeypatch.setattr(imaplib, "IMAP4", Plain)

    session = IMAPSession.connect("localhost", 143, use_ssl=False, timeout=None)

    assert isinstance(session.conn, Plain)
    assert opened == [("localhost", 143)]
