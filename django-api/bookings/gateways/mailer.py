"""Email delivery through Django's email framework."""

import logging

from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from bookings.domain import Milestone, Session
from bookings.domain.timezones import format_for_participant
from bookings.domain.windows import JOIN_OPENS_BEFORE_START
from bookings.gateways.interfaces import Mailer

logger = logging.getLogger(__name__)

REMINDER_SUBJECTS = {
    Milestone.DAY_BEFORE: "Reminder: {title} (tomorrow)",
    Milestone.HOUR_BEFORE: "Reminder: {title} (starting soon)",
}


class DjangoMailer(Mailer):
    def __init__(self, site_url: str, from_email: str | None = None) -> None:
        self._site_url = site_url
        self._from_email = from_email

    def send_confirmation(
        self, *, to: str, session: Session, timezone_name: str | None
    ) -> bool:
        return self._send(
            to=to,
            subject=f"You're in: {session.title}",
            template="bookings/email/confirmation.html",
            context=self._context(session, timezone_name),
        )

    def send_reminder(
        self,
        *,
        to: str,
        session: Session,
        milestone: Milestone,
        timezone_name: str | None,
    ) -> bool:
        context = self._context(session, timezone_name)
        context["milestone"] = milestone.value
        return self._send(
            to=to,
            subject=REMINDER_SUBJECTS[milestone].format(title=session.title),
            template="bookings/email/reminder.html",
            context=context,
        )

    def _context(self, session: Session, timezone_name: str | None) -> dict:
        return {
            "title": session.title,
            "when": format_for_participant(session.starts_at, timezone_name),
            "site_url": self._site_url,
            "join_opens_minutes": int(JOIN_OPENS_BEFORE_START.total_seconds() // 60),
        }

    def _send(self, *, to: str, subject: str, template: str, context: dict) -> bool:
        html = render_to_string(template, context)
        message = EmailMultiAlternatives(
            subject=subject,
            body=strip_tags(html),
            from_email=self._from_email,
            to=[to],
        )
        message.attach_alternative(html, "text/html")
        delivered = message.send() == 1
        logger.info("Email dispatched", extra={"subject": subject, "delivered": delivered})
        return delivered
