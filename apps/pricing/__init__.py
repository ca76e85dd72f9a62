"""Pricing app package.

Holds seasonal pricing phases and the nightly price calculator used when a
booking is created, edited by an admin or re-dated from the shared calendar.
"""
