"""Outbound email for PC notifications.

Senders never raise for delivery problems; they return a SendResult the
outbox records.
"""
from __future__ import annotations

import json
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from html import escape
from typing import Any, Mapping, Optional, Protocol, Sequence
from urllib import error as urlerror
from urllib import request as urlrequest

from ..core.enums import NotificationAction

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"


@dataclass(frozen=True)
class SendResult:
    success: bool
    error: Optional[str] = None
    # Nothing was sent on purpose (e.g. no address on file).
    skipped: bool = False


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


class EmailSender(Protocol):
    def send(self, *, to_email: str, to_name: str, subject: str, html: str, cc: Sequence[str] = ()) -> SendResult:
        raise NotImplementedError


class NullEmailSender:
    """Used when email is disabled; every send is reported as failed."""

    def send(self, *, to_email: str, to_name: str, subject: str, html: str, cc: Sequence[str] = ()) -> SendResult:
        logger.info("Email disabled; not sending %r to %s", subject, to_email)
        return SendResult(False, "Email delivery is disabled")


class SmtpEmailSender:
    def __init__(
        self,
        *,
        host: str,
        port: int = 587,
        user: str = "",
        password: str = "",
        use_tls: bool = True,
        sender: str,
        sender_name: str = "",
        timeout: int = 10,
    ):
        self._host = host
        self._port = int(port)
        self._user = user
        self._password = password
        self._use_tls = use_tls
        self._sender = sender
        self._sender_name = sender_name
        self._timeout = timeout

    def send(self, *, to_email: str, to_name: str, subject: str, html: str, cc: Sequence[str] = ()) -> SendResult:
        if not self._host:
            return SendResult(False, "SMTP not configured")

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = f"{self._sender_name} <{self._sender}>" if self._sender_name else self._sender
        msg["To"] = f"{to_name} <{to_email}>" if to_name else to_email
        if cc:
            msg["Cc"] = ", ".join(cc)
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                if self._use_tls:
                    smtp.starttls()
                if self._user:
                    smtp.login(self._user, self._password)
                smtp.send_message(msg)
            return SendResult(True)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("SMTP send to %s failed: %s", to_email, exc)
            return SendResult(False, str(exc)[:400])


class BrevoEmailSender:
    """Brevo transactional email API."""

    def __init__(self, *, api_key: str, sender: str, sender_name: str = "", api_url: str = BREVO_API_URL, timeout: int = 10):
        self._api_key = api_key
        self._sender = sender
        self._sender_name = sender_name
        self._api_url = api_url
        self._timeout = timeout

    def payload(self, *, to_email: str, to_name: str, subject: str, html: str, cc: Sequence[str] = ()) -> dict:
        body: dict[str, Any] = {
            "sender": {"name": self._sender_name, "email": self._sender},
            "to": [{"email": to_email, "name": to_name}],
            "subject": subject,
            "htmlContent": html,
        }
        if cc:
            body["cc"] = [{"email": addr} for addr in cc]
        return body

    def send(self, *, to_email: str, to_name: str, subject: str, html: str, cc: Sequence[str] = ()) -> SendResult:
        if not self._api_key:
            logger.error("Brevo API key missing")
            return SendResult(False, "API Key missing")

        data = json.dumps(self.payload(to_email=to_email, to_name=to_name, subject=subject, html=html, cc=cc))
        req = urlrequest.Request(
            self._api_url,
            data=data.encode("utf-8"),
            method="POST",
            headers={
                "accept": "application/json",
                "api-key": self._api_key,
                "content-type": "application/json",
            },
        )
        try:
            with urlrequest.urlopen(req, timeout=self._timeout) as resp:
                resp.read()
            return SendResult(True)
        except urlerror.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")[:400]
            logger.error("Brevo error %s: %s", exc.code, detail)
            return SendResult(False, "Brevo request failed")
        except (urlerror.URLError, OSError) as exc:
            logger.error("Brevo request failed: %s", exc)
            return SendResult(False, str(exc)[:400])


def build_email_sender(settings: Any) -> EmailSender:
    backend = (getattr(settings, "EMAIL_BACKEND", "") or "").lower()
    sender = getattr(settings, "EMAIL_SENDER", "")
    sender_name = getattr(settings, "EMAIL_SENDER_NAME", "")
    if backend == "smtp":
        return SmtpEmailSender(
            host=getattr(settings, "SMTP_HOST", ""),
            port=getattr(settings, "SMTP_PORT", 587),
            user=getattr(settings, "SMTP_USER", ""),
            password=getattr(settings, "SMTP_PASSWORD", ""),
            use_tls=bool(getattr(settings, "SMTP_USE_TLS", True)),
            sender=sender,
            sender_name=sender_name,
        )
    if backend == "brevo":
        return BrevoEmailSender(api_key=getattr(settings, "BREVO_API_KEY", ""), sender=sender, sender_name=sender_name)
    return NullEmailSender()


_ROW = '<tr><td style="font-weight: bold; width: 120px;">{label}:</td><td>{value}</td></tr>'


def _shown(value: Any) -> str:
    if value is None or value == "":
        return "None"
    return escape(str(value))


def render_pc_email(
    *,
    action: NotificationAction,
    pc_name: str,
    project_name: str,
    task_name: str,
    assignee: str,
    status: str,
    priority: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    changes: Optional[Mapping[str, Mapping[str, Any]]] = None,
    tracker_url: str = "",
) -> RenderedEmail:
    created = action == NotificationAction.CREATED
    subject = f"{'New Task' if created else 'Task Updated'}: {project_name} - {task_name}"

    rows = [
        ("Project", project_name),
        ("Task/Phase", task_name),
        ("Assignee", assignee),
        ("Status", status),
    ]
    if priority:
        rows.append(("Priority", priority))
    rows.append(("Start Date", start_date or "Not set"))
    rows.append(("End Date", end_date or "Not set"))

    parts = [
        '<div style="font-family: sans-serif; max-width: 600px; margin: auto; padding: 20px;">',
        '<h2 style="color: #4f46e5;">Team Tracker Notification</h2>',
        f"<p>Hello <strong>{escape(pc_name)}</strong>,</p>",
        f"<p>A task you are coordinating has been <strong>{'created' if created else 'updated'}</strong>.</p>",
        '<table style="width: 100%;">',
        *(_ROW.format(label=label, value=escape(str(value or ""))) for label, value in rows),
        "</table>",
    ]

    if not created and changes:
        parts.append('<h3 style="color: #374151;">Changes made:</h3>')
        parts.append('<ul style="list-style: none; padding: 0;">')
        for name, change in changes.items():
            parts.append(
                "<li>"
                f"<strong>{escape(name.replace('_', ' ').capitalize())}:</strong> "
                f'<span style="color: #991b1b; text-decoration: line-through;">{_shown(change.get("old"))}</span> '
                f'<span style="color: #166534;">&rarr; {_shown(change.get("new"))}</span>'
                "</li>"
            )
        parts.append("</ul>")

    if tracker_url:
        parts.append(f'<p style="margin-top: 30px;"><a href="{escape(tracker_url, quote=True)}">View in Tracker</a></p>')
    parts.append("</div>")

    return RenderedEmail(subject=subject, html="\n".join(parts))
