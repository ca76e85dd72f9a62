"""Calendar sync app package.

Keeps the booking ledger and the shared Google calendar consistent: the
calendar adapter, the reconciler that pushes bookings to the calendar and
absorbs manual edits made there, and the linking graph that groups manual
calendar entries into one logical stay.
"""
