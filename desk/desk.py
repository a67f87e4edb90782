"""
Heronix Teacher Desk — desktop client for teachers.

Signs in against the SIS server, then keeps a small status window open
with polls, device approvals, the dismissal board and discipline tickets.
Server URLs live in config.json in the per-user data folder.

Usage:
    python desk.py
"""

from desk_core.runner import run_with_auto_restart


if __name__ == "__main__":
    run_with_auto_restart()
