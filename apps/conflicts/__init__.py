"""Conflicts app package.

Detects double bookings between bookings and the shared calendar, keeps the
ignore/notified markers that suppress repeated reports and decides which
conflicts are handed to the admin notifier.
"""
