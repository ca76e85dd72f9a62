"""Calendar colour tags.

Google Calendar identifies event colours with small integers encoded as
strings ("1".."11"). One of them is reserved for informational entries that
never block availability; the others are used as identity tags so that
related entries share a colour.
"""

from __future__ import annotations

from typing import Iterable

from django.conf import settings  # type: ignore

IDENTITY_PALETTE: tuple[str, ...] = ("1", "2", "3", "4", "5", "6", "7", "8", "9", "11")


def info_color() -> str:
    return str(getattr(settings, "CALENDAR_INFO_COLOR", "10"))


def link_fallback_color() -> str:
    return str(getattr(settings, "CALENDAR_LINK_FALLBACK_COLOR", "9"))


def _string_hash(value: str) -> int:
    """32-bit signed rolling hash (h * 31 + code unit)."""
    result = 0
    for char in value:
        result = ((result << 5) - result + ord(char)) & 0xFFFFFFFF
    if result >= 0x80000000:
        result -= 0x100000000
    return result


def color_for_identifier(value: object) -> str:
    """Stable identity colour for a booking code or event id."""
    return IDENTITY_PALETTE[abs(_string_hash(str(value))) % len(IDENTITY_PALETTE)]


def distinct_colors(identifiers: Iterable[str], taken: Iterable[str] = ()) -> dict[str, str]:
    """
    Assign every identifier its own colour.

    Each identifier starts from its hash colour; on a clash the next unused
    palette entry is taken. Once the palette is exhausted colours repeat.
    """
    used = set(taken)
    assigned: dict[str, str] = {}
    for identifier in identifiers:
        preferred = color_for_identifier(identifier)
        start = IDENTITY_PALETTE.index(preferred)
        candidates = IDENTITY_PALETTE[start:] + IDENTITY_PALETTE[:start]
        color = next((candidate for candidate in candidates if candidate not in used), preferred)
        assigned[identifier] = color
        used.add(color)
    return assigned
