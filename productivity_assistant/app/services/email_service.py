"""
Outbound e-mail.
SMTPMailer sends blocking SMTP mail and is meant to run inside a FastAPI
background task (executed in the threadpool after the response is sent).
deliver_team_invitation is the background job: it never raises, failures
are logged.
"""
from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from html import escape

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeamInvitationEmail:
    recipient_email: str
    recipient_name: str
    team_name: str
    inviter_name: str
    role: str


class SMTPMailer:
    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.use_tls = use_tls
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.host and self.username)

    def send(self, *, to: str, subject: str, text: str, html: str | None = None) -> None:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        msg.set_content(text)
        if html:
            msg.add_alternative(html, subtype="html")

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password)
            smtp.send_message(msg)

    def send_team_invitation(self, invitation: TeamInvitationEmail) -> None:
        subject, text, html = render_team_invitation(invitation)
        self.send(to=invitation.recipient_email, subject=subject, text=text, html=html)


def render_team_invitation(invitation: TeamInvitationEmail) -> tuple[str, str, str]:
    """Return (subject, plain text, html) for a team invitation."""
    role_label = "Team Leader" if invitation.role == "leader" else "Team Member"
    permissions = (
        "You will have full team management permissions."
        if invitation.role == "leader"
        else "You can view and update team tasks."
    )
    dashboard_url = f"{settings.FRONTEND_URL.rstrip('/')}/dashboard"
    subject = f"You've been invited to join {invitation.team_name}!"

    text = (
        f"Hi {invitation.recipient_name},\n\n"
        f"{invitation.inviter_name} has invited you to join their team!\n\n"
        f"Team: {invitation.team_name}\n"
        f"Your Role: {role_label}\n"
        f"{permissions}\n\n"
        f"View it in your dashboard: {dashboard_url}\n\n"
        "You're receiving this email because someone added you to a team in "
        "Productivity Assistant. If you didn't expect this invitation, you can "
        "safely ignore this email.\n"
    )
    html = (
        "<html><body>"
        "<h1>Team Invitation</h1>"
        f"<p>Hi {escape(invitation.recipient_name)},</p>"
        f"<p><strong>{escape(invitation.inviter_name)}</strong> has invited you to join their team!</p>"
        f"<h2>Team: {escape(invitation.team_name)}</h2>"
        f"<p><strong>Your Role:</strong> {role_label}</p>"
        f"<p>{permissions}</p>"
        f'<p><a href="{escape(dashboard_url)}">View in Dashboard</a></p>'
        "<p>You're receiving this email because someone added you to a team in "
        "Productivity Assistant. If you didn't expect this invitation, you can "
        "safely ignore this email.</p>"
        "</body></html>"
    )
    return subject, text, html


def deliver_team_invitation(mailer: SMTPMailer, invitation: TeamInvitationEmail) -> None:
    """Background job. Errors are logged and swallowed; the invite already succeeded."""
    if not mailer.configured:
        logger.info(
            "SMTP not configured; skipping invitation email to %s", invitation.recipient_email
        )
        return
    try:
        mailer.send_team_invitation(invitation)
        logger.info("Invitation email sent to %s", invitation.recipient_email)
    except Exception:
        logger.exception("Failed to send invitation email to %s", invitation.recipient_email)


mailer = SMTPMailer(
    host=settings.SMTP_HOST,
    port=settings.SMTP_PORT,
    username=settings.SMTP_USER,
    password=settings.SMTP_PASSWORD,
    sender=settings.SMTP_FROM,
    use_tls=settings.SMTP_USE_TLS,
)


def get_mailer() -> SMTPMailer:
    """FastAPI dependency; override in tests."""
    return mailer
