from functools import lru_cache

from fastapi_mail import FastMail, MessageSchema, ConnectionConfig, MessageType

from menta.core.config import settings
from menta.core.logging import get_logger
from menta.utils.helpers import mask_email

logger = get_logger(__name__)


class EmailManager:
    def __init__(self):
        # Check if email is configured
        if not settings.MAIL_USERNAME or not settings.MAIL_FROM:
            self.conf = None
            self.fm = None
            logger.warning("Email not configured. Verification codes will only be logged as sent.")
            return

        try:
            self.conf = ConnectionConfig(
                MAIL_USERNAME=settings.MAIL_USERNAME,
                MAIL_PASSWORD=settings.MAIL_PASSWORD,
                MAIL_FROM=settings.MAIL_FROM,
                MAIL_PORT=settings.MAIL_PORT,
                MAIL_SERVER=settings.MAIL_SERVER,
                MAIL_FROM_NAME=settings.MAIL_FROM_NAME,
                MAIL_STARTTLS=settings.MAIL_STARTTLS,
                MAIL_SSL_TLS=settings.MAIL_SSL_TLS,
                USE_CREDENTIALS=settings.USE_CREDENTIALS,
                VALIDATE_CERTS=settings.VALIDATE_CERTS,
            )
            self.fm = FastMail(self.conf)
        except Exception as e:
            self.conf = None
            self.fm = None
            logger.error("Email configuration error. Email delivery disabled.", error=str(e))

    async def send_otp_email(self, email: str, otp_code: str) -> bool:
        """Send a registration verification code. Returns False when delivery fails."""
        if not self.fm:
            logger.warning("Email not configured. Skipping OTP delivery.", email=mask_email(email))
            return True  # Development without SMTP

        html_content = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
            <div style="background: linear-gradient(to right, #0ea5e9, #3b82f6); padding: 20px;
                        text-align: center; color: white; border-radius: 8px 8px 0 0;">
                <h1 style="margin: 0;">MENTA-DBMS</h1>
                <p style="margin: 5px 0 0;">Mental Healthcare Management System</p>
            </div>
            <div style="background-color: #f9fafb; padding: 20px; border-radius: 0 0 8px 8px; text-align: center;">
                <h2>Your Verification Code</h2>
                <p>Please use the following code to verify your email address:</p>
                <div style="font-size: 32px; font-weight: bold; letter-spacing: 8px; margin: 20px 0;
                            padding: 10px; background-color: #ffffff; border-radius: 4px;
                            border: 1px solid #e5e7eb;">{otp_code}</div>
                <p style="color: #4b5563; font-size: 14px;">
                    This code will expire in {settings.OTP_EXPIRE_MINUTES} minutes.
                </p>
                <p style="color: #4b5563; font-size: 14px; margin-top: 20px;">
                    If you didn't request this code, please ignore this email.
                </p>
            </div>
        </div>
        """

        message = MessageSchema(
            subject="Your Verification Code",
            recipients=[email],
            body=html_content,
            subtype=MessageType.html
        )

        try:
            await self.fm.send_message(message)
        except Exception as e:
            logger.error("Failed to send OTP email", email=mask_email(email), error=str(e))
            return False
        return True


@lru_cache
def get_email_manager() -> EmailManager:
    """Dependency returning the delivery collaborator for verification codes.

    Built on first use, so importing the app does not touch mail settings.
    """
    return EmailManager()
