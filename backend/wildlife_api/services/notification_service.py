"""Email notification helpers for bookings."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Iterable

from fastapi import BackgroundTasks

from wildlife_api.core.config import get_settings
from wildlife_api.models.booking import Booking

logger = logging.getLogger(__name__)


def schedule_email(
    background_tasks: BackgroundTasks,
    *,
    recipients: Iterable[str | None],
    subject: str,
    body: str,
) -> bool:
    """Queue an email to be delivered after the response is sent."""
    recipients_list = [addr for addr in recipients if addr]
    if not recipients_list:
        logger.debug("No recipients provided for email; skipping")
        return False
    settings = get_settings()
    if not settings.smtp_host or not settings.smtp_port:
        logger.debug("SMTP disabled; skipping email to %s", recipients_list)
        return False
    background_tasks.add_task(_send_email, recipients_list, subject, body)
    return True


def build_booking_created_email(
    *,
    activity_title: str,
    booking_ref: str,
    booking_date: str,
    participants: int,
    total: str,
    currency: str,
) -> tuple[str, str]:
    subject = f"Booking {booking_ref} received: {activity_title}"
    body = (
        f"Hello,\n\nWe have received your booking for {activity_title} on {booking_date} "
        f"for {participants} participant(s).\n"
        f"Reference: {booking_ref}\nTotal: {currency} {total}\n\n"
        "Our team will confirm your booking shortly.\n"
    )
    return subject, body


def build_booking_cancelled_email(
    *, activity_title: str, booking_ref: str, booking_date: str, reason: str | None
) -> tuple[str, str]:
    subject = f"Booking {booking_ref} cancelled"
    lines = [
        "Hello,",
        "",
        f"Your booking for {activity_title} on {booking_date} has been cancelled.",
    ]
    if reason:
        lines.append(f"Reason: {reason}")
    lines.extend(["", "Please contact us if you would like to rebook."])
    return subject, "\n".join(lines)


def _recipient(booking: Booking) -> str | None:
    if booking.contact_email:
        return booking.contact_email
    customer = getattr(booking, "customer", None)
    return getattr(customer, "email", None)


def _activity_title(booking: Booking) -> str:
    activity = getattr(booking, "activity", None)
    return getattr(activity, "title", None) or "your activity"


def notify_booking_created(booking: Booking, background_tasks: BackgroundTasks) -> bool:
    subject, body = build_booking_created_email(
        activity_title=_activity_title(booking),
        booking_ref=booking.booking_ref,
        booking_date=booking.booking_date.isoformat(),
        participants=booking.total_participants,
        total=f"{booking.total_price:.2f}",
        currency=booking.currency,
    )
    return schedule_email(
        background_tasks, recipients=[_recipient(booking)], subject=subject, body=body
    )


def notify_booking_cancelled(booking: Booking, background_tasks: BackgroundTasks) -> bool:
    subject, body = build_booking_cancelled_email(
        activity_title=_activity_title(booking),
        booking_ref=booking.booking_ref,
        booking_date=booking.booking_date.isoformat(),
        reason=booking.cancellation_reason,
    )
    return schedule_email(
        background_tasks, recipients=[_recipient(booking)], subject=subject, body=body
    )


def _send_email(recipients: list[str], subject: str, body: str) -> None:
    settings = get_settings()
    if not settings.smtp_host or not settings.smtp_port:
        logger.info("SMTP settings missing; skipping email delivery to %s", recipients)
        return

    message = EmailMessage()
    message["Subject"] = subject
    message["To"] = ", ".join(recipients)
    message["From"] = settings.smtp_from or settings.smtp_username or "no-reply@wildlife.local"
    message.set_content(body)

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as smtp:
            if settings.smtp_username and settings.smtp_password:
                smtp.starttls()
                smtp.login(settings.smtp_username, settings.smtp_password)
            smtp.send_message(message)
        logger.info("Email sent to %s", recipients)
    except Exception as exc:  # pragma: no cover - logging side-effect only
        logger.exception("Failed to send email to %s: %s", recipients, exc)
