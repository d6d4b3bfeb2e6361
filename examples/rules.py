"""
Example rules file for ``imap-guard run``.

``guard`` (logged in) and ``Query`` are provided by the command.
"""

base_query = Query().unflagged().unanswered()

guard.select("INBOX")

# Github
for sender in ("github.com", "notifications@travis-ci.org", "app@gemnasium.com"):
    guard.move(base_query.clone().from_(sender), "INBOX.Github")

# To Do
guard.move(base_query.clone().from_("me").to("me"), "INBOX.TODO")

# Ops
guard.select("INBOX.Ops")
query = base_query.clone().seen()
guard.delete(query.clone().subject("monit alert -- ").before(7))
guard.delete(query.clone().subject("CRON-APT completed on ").before(3))
guard.delete(query.clone().subject("Logwatch for ").before(7))
guard.select("INBOX")

# Uni
guard.move(base_query.clone().or_(("from", "uni.tld"), ("to", "uni.tld")), "INBOX.Uni")
