"""
Parsed representation of fetched messages.

Wraps the standard library email parser so filters and debug hooks can read
decoded headers and the text body without any I/O.
"""

import email
import email.utils
from dataclasses import dataclass
from email import policy
from email.message import Message
from typing import List


def _part_text(part: Message) -> str:
    payload = part.get_payload(decode=True)
    if payload is None:
        return ""
    charset = part.get_content_charset() or "utf-8"
    try:
        return payload.decode(charset, errors="replace")
    except LookupError:
        return payload.decode("utf-8", errors="replace")


def _body_text(message: Message) -> str:
    """Return the first text/plain part, else the first text part."""
    if not message.is_multipart():
        return _part_text(message)

    fallback = None
    for part in message.walk():
        if part.is_multipart() or part.get_content_disposition() == "attachment":
            continue
        if part.get_content_type() == "text/plain":
            return _part_text(part)
        if fallback is None and part.get_content_maintype() == "text":
            fallback = part
    return _part_text(fallback) if fallback is not None else ""


@dataclass
class ParsedMessage:
    """A fetched message with its commonly used fields decoded."""

    message: Message
    subject: str
    sender: str
    from_address: str
    recipients: List[str]
    date: str
    body: str

    def header(self, name: str, default: str = "") -> str:
        """Get a decoded header value."""
        value = self.message.get(name)
        if value is None:
            return default
        return str(value).strip()


def parse_message(raw: bytes) -> ParsedMessage:
    """Parse raw RFC 822 bytes.

    Args:
        raw: Message content as fetched from the server

    Returns:
        ParsedMessage for filter and debug use
    """
    # Decodes RFC 2047 and raw UTF-8 headers; malformed words become defects
    message = email.message_from_bytes(raw, policy=policy.default)
    sender = str(message.get("From", "")).strip()
    recipients = [
        addr.lower()
        for _, addr in email.utils.getaddresses(
            [str(value) for value in message.get_all("To", []) + message.get_all("Cc", [])]
        )
        if addr
    ]
    return ParsedMessage(
        message=message,
        subject=str(message.get("Subject", "")).strip(),
        sender=sender,
        from_address=email.utils.parseaddr(str(message.get("From", "")))[1].lower(),
        recipients=recipients,
        date=str(message.get("Date", "")),
        body=_body_text(message),
    )
