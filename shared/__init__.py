"""
Shared Kernel

Date handling and infrastructure helpers used by every app: the inclusive
DateInterval, time zone normalization and encrypted model fields.
"""
