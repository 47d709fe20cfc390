"""
Notes API - Mail Service
========================

What:  Sends the welcome email after registration.
How:   Builds an email.message.EmailMessage (plain text + HTML alternative)
       and delivers it with aiosmtplib using the SMTP settings.
Who:   AuthService.send_welcome_email, run as a background task.

Delivery is skipped with a warning when MAIL_USERNAME is empty, which is
the default for local development and tests.
"""

import logging
from email.message import EmailMessage

import aiosmtplib

from notes_api.config import Settings

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "welcome to our website"
WELCOME_TEXT = "you are registered successfully"
WELCOME_HTML = "<h1>Welcome!</h1><p>Thank you for registering.</p>"


class MailService:
    def __init__(self, settings: Settings):
        self.host = settings.mail_host
        self.port = settings.mail_port
        self.username = settings.mail_username
        self.password = settings.mail_password
        self.sender = settings.mail_from or settings.mail_username
        self.start_tls = settings.mail_starttls
        self.timeout = settings.mail_timeout

    @property
    def enabled(self) -> bool:
        return bool(self.username)

    def build_welcome_message(self, recipient: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = recipient
        message["Subject"] = WELCOME_SUBJECT
        message.set_content(WELCOME_TEXT)
        message.add_alternative(WELCOME_HTML, subtype="html")
        return message

    async def send(self, message: EmailMessage) -> None:
        """Deliver a message over SMTP. aiosmtplib errors propagate to the caller."""
        await aiosmtplib.send(
            message,
            hostname=self.host,
            port=self.port,
            username=self.username,
            password=self.password,
            start_tls=self.start_tls,
            timeout=self.timeout,
        )

    async def send_welcome(self, recipient: str) -> bool:
        """
        Send the welcome email to a newly registered user.

        Returns False without contacting the server when mail is disabled.
        """
        if not self.enabled:
            logger.warning("Mail delivery disabled; skipping welcome email")
            return False

        await self.send(self.build_welcome_message(recipient))
        logger.info("Welcome email sent")
        return True
