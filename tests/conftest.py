"""
Shared fakes for IMAP Guard tests.

FakeSession records every transport call so tests can assert on ordering;
FakeIMAP stands in for an imaplib connection.
"""

import pytest

RAW_MESSAGE = (
    b"From: GitHub <notifications@github.com>\r\n"
    b"To: Me <me@example.test>\r\n"
    b"Subject: =?utf-8?q?Build_f=C3=A4iled?=\r\n"
    b"Date: Mon, 18 Mar 2013 10:00:00 +0000\r\n"
    b"Content-Type: text/plain; charset=utf-8\r\n"
    b"\r\n"
    b"Your build failed.\r\n"
)


class FakeSession:
    """Records calls made by a Guard."""

    def __init__(self, results=(7, 28), mailboxes=("INBOX", "Archive", "Drafts")):
        self.results = list(results)
        self.mailboxes = list(mailboxes)
        self.calls = []

    def login(self, username, password):
        self.calls.append(("login", username, password))

    def select(self, mailbox, readonly=False):
        self.calls.append(("select", mailbox, readonly))

    def search(self, criteria):
        self.calls.append(("search", criteria))
        return list(self.results)

    def fetch_peek(self, uid):
        self.calls.append(("fetch", uid))
        return RAW_MESSAGE

    def mark_deleted(self, uid):
        self.calls.append(("delete", uid))

    def copy(self, uid, mailbox):
        self.calls.append(("copy", uid, mailbox))

    def expunge(self):
        self.calls.append(("expunge",))

    def close(self):
        self.calls.append(("close",))

    def logout(self):
        self.calls.append(("logout",))

    def list_mailboxes(self):
        self.calls.append(("list",))
        return list(self.mailboxes)

    def names(self):
        return [call[0] for call in self.calls]


class FakeIMAP:
    """Minimal imaplib.IMAP4 replacement returning canned responses."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def _respond(self, key, default=("OK", [None])):
        return self.responses.get(key, default)

    def login(self, username, password):
        self.calls.append(("LOGIN", username, password))
        return self._respond("LOGIN", ("OK", [b"LOGIN completed"]))

    def select(self, mailbox="INBOX", readonly=False):
        self.calls.append(("SELECT", mailbox, readonly))
        return self._respond("SELECT", ("OK", [b"3"]))

    def uid(self, command, *args):
        self.calls.append(("UID", command) + args)
        return self._respond(command)

    def expunge(self):
        self.calls.append(("EXPUNGE",))
        return self._respond("EXPUNGE")

    def close(self):
        self.calls.append(("CLOSE",))
        return self._respond("CLOSE")

    def logout(self):
        self.calls.append(("LOGOUT",))
        return ("BYE", [b"LOGOUT received"])

    def list(self):
        self.calls.append(("LIST",))
        return self._respond("LIST", ("OK", []))


@pytest.fixture
def settings():
    return {
        "host": "localhost",
        "port": 993,
        "username": "bob",
        "password": "PASS",
    }


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def make_guard(settings, session):
    """Build a logged-in Guard backed by the shared FakeSession."""
    from imap_guard import Guard

    def factory(**custom_settings):
        guard = Guard(dict(settings, **custom_settings), connect=lambda host, port: session)
        guard.login()
        guard.select("INBOX")
        session.calls.clear()
        return guard

    return factory
