#!/usr/bin/env python3
"""
Basic usage example for IMAP Guard.

Shows a guard driven directly from Python with a filter and a debug hook.
"""

from imap_guard import ConfigManager, Guard, Query


def main():
    """Basic usage example."""
    print("IMAP Guard - Basic Usage Example")
    print("=" * 45)

    settings = ConfigManager().get_settings(read_only=True)
    print(f"Dry run: {settings.read_only}")
    print(f"Server: {settings.host}:{settings.port}")

    guard = Guard(settings)
    guard.debug = lambda mail: print(f"{mail.subject}: ", end="")
    guard.login()

    try:
        print("\nMailboxes:")
        for name in guard.list():
            print(f"- {name}")

        guard.select("INBOX")
        newsletters = Query().seen().unflagged().before(30)
        guard.delete(newsletters, filter=lambda mail: "unsubscribe" in mail.body.lower())

        guard.each(Query().unseen(), lambda uid: print(f"unread UID {uid}", end=" "))
    finally:
        guard.disconnect()


if __name__ == "__main__":
    main()
