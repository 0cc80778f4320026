"""
Email Service using Resend

Handles outbound email for onboarding and admin announcements.

The EmailClient is created once in the application lifespan and injected
into request handlers with get_email_client.
"""

import asyncio
import logging
from html import escape

import resend
from fastapi import Request

logger = logging.getLogger(__name__)

# Resend accepts at most 100 messages per batch call
BATCH_SEND_LIMIT = 100

_BASE_STYLE = """
            body {{ font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 40px 20px; }}
            .header {{ color: #1a365d; margin-bottom: 24px; }}
            .button {{ display: inline-block; background-color: #1a365d; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; margin: 24px 0; }}
            .footer {{ margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }}
"""


class EmailClient:
    """
    Thin async wrapper around the Resend API.

    When no API key is configured, emails are logged instead of sent.

    Args:
        api_key: Resend API key (None disables sending)
        sender: From address
        frontend_url: Base URL used to build links in templates
    """

    def __init__(self, api_key: str | None, sender: str, frontend_url: str):
        self.api_key = api_key
        self.sender = sender
        self.frontend_url = frontend_url.rstrip("/")

    async def send_email(self, to_email: str, subject: str, html_content: str) -> bool:
        """
        Send a single email.

        Returns:
            True if the email was sent (or logged), False on failure
        """
        if not self.api_key:
            logger.warning("RESEND_API_KEY not set - logging email instead of sending")
            logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
            return True

        params: resend.Emails.SendParams = {
            "from": self.sender,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }
        try:
            resend.api_key = self.api_key
            # Resend is synchronous; keep it off the event loop
            email = await asyncio.to_thread(resend.Emails.send, params)
            logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
            return True
        except Exception as e:
            logger.error(f"Failed to send email to {to_email}: {e}")
            return False

    async def send_bulk(self, recipients: list[str], subject: str, html_content: str) -> int:
        """
        Send the same email to many recipients, one message each.

        Recipients never see each other's addresses.

        Returns:
            Number of recipients whose batch was accepted by Resend
        """
        if not self.api_key:
            logger.warning("RESEND_API_KEY not set - logging bulk email instead of sending")
            logger.info(f"BULK EMAIL TO: {len(recipients)} recipients | SUBJECT: {subject}")
            return len(recipients)

        resend.api_key = self.api_key
        delivered = 0
        for start in range(0, len(recipients), BATCH_SEND_LIMIT):
            chunk = recipients[start : start + BATCH_SEND_LIMIT]
            params: list[resend.Emails.SendParams] = [
                {"from": self.sender, "to": [to], "subject": subject, "html": html_content}
                for to in chunk
            ]
            try:
                await asyncio.to_thread(resend.Batch.send, params)
                delivered += len(chunk)
            except Exception as e:
                logger.error(f"Failed to send bulk email chunk starting at {start}: {e}")

        logger.info(f"Bulk email '{subject}' accepted for {delivered}/{len(recipients)} recipients")
        return delivered

    async def send_bulk_announcement(
        self, recipients: list[str], subject: str, message: str
    ) -> int:
        """Send an admin announcement to a list of students."""
        return await self.send_bulk(
            recipients,
            subject=subject,
            html_content=render_announcement(subject, message),
        )

    async def send_onboarding_welcome(
        self,
        to_email: str,
        student_name: str,
        batch_name: str,
    ) -> bool:
        """Send the welcome email after a student completes onboarding."""
        safe_student_name = escape(student_name)
        safe_batch_name = escape(batch_name)
        profile_url = f"{self.frontend_url}/profile"

        html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            {_BASE_STYLE.format()}
        </style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">Welcome aboard!</h1>

            <p>Hello {safe_student_name},</p>

            <p>Your onboarding is complete and you have been placed in batch <strong>{safe_batch_name}</strong>.</p>

            <p>Complete the remaining sections of your profile and upload your documents to keep your application moving:</p>

            <a href="{profile_url}" class="button">Complete Your Profile</a>

            <div class="footer">
                <p>Student ERP - Admissions Office</p>
            </div>
        </div>
    </body>
    </html>
    """
        return await self.send_email(
            to_email=to_email,
            subject=f"Welcome to batch {safe_batch_name}",
            html_content=html_content,
        )


def render_announcement(subject: str, message: str) -> str:
    """Render a bulk announcement. User input is escaped and newlines preserved."""
    safe_subject = escape(subject)
    safe_message = escape(message).replace("\n", "<br>")
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            {_BASE_STYLE.format()}
        </style>
    </head>
    <body>
        <div class="container">
            <h2 class="header">{safe_subject}</h2>

            <p>{safe_message}</p>

            <div class="footer">
                <p>You are receiving this because you are enrolled with the Admissions Office.</p>
                <p>Student ERP - Admissions Office</p>
            </div>
        </div>
    </body>
    </html>
    """


def get_email_client(request: Request) -> EmailClient:
    """FastAPI dependency returning the application's EmailClient."""
    return request.app.state.email_client
