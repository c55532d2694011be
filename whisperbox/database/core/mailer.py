"""
Verification email delivery over SMTP.

`VerificationMailer.send_verification_email` never raises on delivery
problems: it reports them in a `DeliveryResult` so that registration can
decide what to do with the pending account.
"""

import logging
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate, make_msgid

import aiosmtplib

from whisperbox.database.config.config import Settings

logger = logging.getLogger(__name__)

SUBJECT = "Whisperbox | Verification code"


@dataclass
class DeliveryResult:
    success: bool
    message: str


def build_verification_message(sender: str, recipient: str, username: str, code: str) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = SUBJECT
    msg["From"] = formataddr(("Whisperbox", sender))
    msg["To"] = recipient
    msg["Date"] = formatdate(localtime=False)
    msg["Message-ID"] = make_msgid(domain=sender.split("@")[-1] or None)

    text = (
        f"Hello {username},\n\n"
        f"Thank you for registering. Please use the following verification code "
        f"to complete your registration:\n\n{code}\n\n"
        f"If you did not request this code, please ignore this email.\n"
    )
    html = (
        f"<html><body>"
        f"<h2>Hello {username},</h2>"
        f"<p>Thank you for registering. Please use the following verification code "
        f"to complete your registration:</p>"
        f"<p style=\"font-size:24px;letter-spacing:4px\"><strong>{code}</strong></p>"
        f"<p>If you did not request this code, please ignore this email.</p>"
        f"</body></html>"
    )
    msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))
    return msg


class VerificationMailer:
    def __init__(self, settings: Settings, timeout: float = 30):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.sender = settings.SENDER_EMAIL
        self.password = settings.APP_PASSWORD
        self.timeout = timeout

    async def send_verification_email(self, email: str, username: str, code: str) -> DeliveryResult:
        if not self.sender:
            logger.error("SENDER_EMAIL is not configured, cannot deliver verification email")
            return DeliveryResult(False, "Email delivery is not configured")

        msg = build_verification_message(self.sender, email, username, code)
        try:
            await aiosmtplib.send(
                msg,
                hostname=self.host,
                port=self.port,
                username=self.sender if self.password else None,
                password=self.password or None,
                use_tls=self.port == 465,
                start_tls=self.port == 587,
                timeout=self.timeout,
            )
        except aiosmtplib.SMTPResponseException as e:
            logger.error("SMTP rejected verification email for %s: %s %s", username, e.code, e.message)
            return DeliveryResult(False, "Failed to send verification email")
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("Verification email delivery failed for %s: %s", username, e)
            return DeliveryResult(False, "Failed to send verification email")

        logger.info("Verification email sent to %s", username)
        return DeliveryResult(True, "Verification email sent successfully")
