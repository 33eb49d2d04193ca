"""Service for sending one-time codes by email."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.config.settings import Settings
from app.utils.errors import DeliveryError

logger = logging.getLogger(__name__)


class EmailService:
    """Sends verification and password-reset codes via SMTP."""

    def __init__(self, settings: Settings):
        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_username = settings.smtp_username
        self.smtp_password = settings.smtp_password
        self.smtp_use_tls = settings.smtp_use_tls
        self.from_email = settings.smtp_from_email
        self.from_name = settings.smtp_from_name
        self.enabled = settings.smtp_enabled

    def send_verification_code(self, to_email: str, code: str) -> None:
        """
        Send the email-verification code.

        Raises:
            DeliveryError: If the SMTP server rejected or could not be reached
        """
        subject = "Verify your email"
        text_body = (
            "Welcome to Task Manager!\n\n"
            f"Your verification code is: {code}\n\n"
            "If you did not create an account, you can ignore this email."
        )
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #1e293b;">Welcome to Task Manager!</h2>
                <p style="color: #475569;">Use the code below to verify your email address:</p>
                <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px; color: #0f172a;">{code}</p>
                <p style="color: #64748b; font-size: 14px;">
                    If you did not create an account, you can ignore this email.
                </p>
            </body>
        </html>
        """
        self._send_email(to_email, subject, html_body, text_body, code)

    def send_password_reset_code(self, to_email: str, code: str, expires_minutes: int) -> None:
        """
        Send the password-reset code.

        Raises:
            DeliveryError: If the SMTP server rejected or could not be reached
        """
        subject = "Password reset code"
        text_body = (
            f"Your password reset code is: {code}\n\n"
            f"This code expires in {expires_minutes} minutes.\n\n"
            "If you did not request a password reset, you can ignore this email."
        )
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #1e293b;">Reset your password</h2>
                <p style="color: #475569;">Use the code below to choose a new password:</p>
                <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px; color: #0f172a;">{code}</p>
                <p style="color: #64748b; font-size: 14px;">This code expires in {expires_minutes} minutes.</p>
                <p style="color: #64748b; font-size: 14px;">
                    If you did not request a password reset, you can ignore this email.
                </p>
            </body>
        </html>
        """
        self._send_email(to_email, subject, html_body, text_body, code)

    def _send_email(self, to_email: str, subject: str, html_body: str, text_body: str, code: str) -> None:
        if not self.enabled:
            # Development mode: no SMTP configured
            logger.warning(f"SMTP not configured; code for {to_email} is {code}")
            return

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as server:
                if self.smtp_use_tls:
                    server.starttls()
                if self.smtp_username:
                    server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(f"Failed to send email to {to_email}: {exc}")
            raise DeliveryError("Failed to send email. Please try again.") from exc

        logger.info(f"Email '{subject}' sent to {to_email}")
