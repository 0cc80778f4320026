"""
Communications Service Layer

Resolves the recipients of an admin announcement and sends it in bulk.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from erp.core.email import EmailClient
from erp.modules.communications.schemas import (
    BulkEmailRequest,
    BulkEmailResponse,
    RecipientType,
)
from erp.modules.shared import ServiceError
from erp.modules.students import repository as students_repository

logger = logging.getLogger(__name__)

# Per admin: at most BULK_EMAIL_LIMIT sends per BULK_EMAIL_WINDOW_SECONDS
BULK_EMAIL_LIMIT = 5
BULK_EMAIL_WINDOW_SECONDS = 600


class CommunicationsServiceError(ServiceError):
    """Base exception for communications errors."""


class InvalidRecipientsError(CommunicationsServiceError):
    """Raised when the audience filter is incomplete."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="INVALID_RECIPIENTS",
            status_code=400,
        )


class NoRecipientsError(CommunicationsServiceError):
    """Raised when the audience is empty."""

    def __init__(self):
        super().__init__(
            message="No recipients found",
            error_code="NO_RECIPIENTS",
            status_code=400,
        )


def validate_audience(data: BulkEmailRequest) -> None:
    """
    Check the filter required by the recipient type is present.

    Raises:
        InvalidRecipientsError: batch_id missing for BATCH, or program missing for PROGRAM
    """
    if data.recipient_type == RecipientType.BATCH and data.batch_id is None:
        raise InvalidRecipientsError("batch_id is required for batch emails")
    if data.recipient_type == RecipientType.PROGRAM and data.program is None:
        raise InvalidRecipientsError("program is required for program emails")


async def resolve_recipients(db: AsyncSession, data: BulkEmailRequest) -> list[str]:
    """Email addresses of the students addressed by the request."""
    validate_audience(data)

    if data.recipient_type == RecipientType.BATCH:
        return await students_repository.get_recipient_emails(db, batch_id=data.batch_id)
    if data.recipient_type == RecipientType.PROGRAM:
        return await students_repository.get_recipient_emails(db, program=data.program)
    return await students_repository.get_recipient_emails(db)


async def send_bulk_email(
    db: AsyncSession,
    email_client: EmailClient,
    data: BulkEmailRequest,
) -> BulkEmailResponse:
    """
    Send an announcement to every addressed student.

    Delivery failures are logged by the email client and reflected in
    delivered_count; they do not fail the request.

    Raises:
        InvalidRecipientsError: If the audience filter is incomplete
        NoRecipientsError: If nobody matches
    """
    recipients = await resolve_recipients(db, data)
    if not recipients:
        raise NoRecipientsError()

    delivered = await email_client.send_bulk_announcement(
        recipients,
        subject=data.subject,
        message=data.message,
    )
    logger.info(
        f"Bulk email ({data.recipient_type.value}) '{data.subject}': "
        f"{delivered}/{len(recipients)} delivered"
    )

    return BulkEmailResponse(recipient_count=len(recipients), delivered_count=delivered)
