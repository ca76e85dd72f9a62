"""Notification services for admin emails."""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.db.models import Q  # type: ignore

logger = logging.getLogger(__name__)

PREFERENCE_FIELDS = ("booking_conflict", "new_booking_request")


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(recipient_email: str, subject: str, message: str) -> bool:
    """
    Send a plain-text email.

    Returns:
        bool: True if the mail backend accepted the message
    """
    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            fail_silently=False,
        )
    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False

    logger.info(f"Email sent successfully to {recipient_email}: {subject}")
    return True


def get_admins_to_notify(kind: str = "booking_conflict") -> list[str]:
    """Emails of active staff users who opted in to ``kind`` notifications.

    Admins without a stored preference follow ``CONFLICT_NOTIFICATION_DEFAULT``.
    """
    if kind not in PREFERENCE_FIELDS:
        raise ValueError(f"Unknown notification kind: {kind}")

    admins = get_user_model().objects.filter(is_active=True, is_staff=True).exclude(email="")
    opted_in = Q(**{f"notification_preference__{kind}": True})
    if getattr(settings, "CONFLICT_NOTIFICATION_DEFAULT", False):
        opted_in |= Q(notification_preference__isnull=True)
    return list(admins.filter(opted_in).order_by("email").values_list("email", flat=True).distinct())


def _format_conflict(record: dict) -> str:
    lines = [record["description"], f"Severity: {record['severity']}", ""]
    for booking in record.get("involved_bookings", []):
        guest = booking["guest_name"] or booking["guest_email"]
        lines.append(
            f"- Booking {booking['booking_code']} ({booking['status']}): {guest}, "
            f"{booking['start_date']} - {booking['end_date']}"
        )
    for event in record.get("involved_events", []):
        lines.append(f"- Calendar entry '{event['summary']}': {event['start_date']} - {event['end_date']}")
    admin_url = getattr(settings, "ADMIN_CONFLICTS_URL", "")
    if admin_url:
        lines.extend(["", f"Review: {admin_url}"])
    return "\n".join(lines)


def send_conflict_notification(recipient_email: str, record: dict) -> bool:
    """Email one admin about a detected conflict record."""
    subject = f"Booking conflict: {record['description']}"
    return send_email_notification(recipient_email, subject, _format_conflict(record))
