#!/usr/bin/env python3
"""
IMAP Guard command line launcher.

Usage:
  1) Set env vars IMAP_USER/IMAP_PASS or put them in a .env file
  2) Adjust host, port and read_only in config.json as needed
  3) Run: python imap_guard_cli.py run examples/rules.py
"""

import sys
from imap_guard.cli import main

if __name__ == "__main__":
    sys.exit(main())
