"""Notifications app package.

Delivers admin notifications by email and stores which admins want to
receive which kind of notification.
"""
