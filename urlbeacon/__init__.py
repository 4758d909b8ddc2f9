"""
urlbeacon - Watches a process log for an ephemeral URL and reports it once.

This package tails a growing log file, extracts URLs that match a configured
prefix and domain, waits until a URL has been seen unchanged several times in
a row, and hands it to a notification transport exactly once. The last
delivered URL is persisted so restarts do not resend it.
"""

__version__ = "0.1.0"
