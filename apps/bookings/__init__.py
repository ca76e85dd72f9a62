"""Bookings app package.

Holds the booking ledger of the property: requested and approved stays,
their prices and admin notes. Status and date changes made here are mirrored
to the shared calendar; a calendar failure is logged and picked up by the
next reconciliation run instead of blocking the change.
"""
