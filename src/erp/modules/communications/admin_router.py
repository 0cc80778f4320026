"""
Communications Admin Router

Endpoints:
- POST /admin/emails/bulk - Send an announcement to a batch, a program, or everyone

Rate limited to 5 bulk emails per admin per 10 minutes.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from erp.core.auth import CurrentUser, get_current_admin_user
from erp.core.database import get_db
from erp.core.email import EmailClient, get_email_client
from erp.core.rate_limit import RateLimiter, get_rate_limiter
from erp.modules.audit import record_audit
from erp.modules.communications import service
from erp.modules.communications.schemas import BulkEmailRequest, BulkEmailResponse
from erp.modules.communications.service import (
    BULK_EMAIL_LIMIT,
    BULK_EMAIL_WINDOW_SECONDS,
    CommunicationsServiceError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/bulk",
    response_model=BulkEmailResponse,
    summary="Send Bulk Email",
    responses={
        400: {"description": "Missing batch_id/program, or no recipients"},
        429: {"description": "Too many bulk emails, retry after the window"},
    },
)
async def send_bulk_email(
    body: BulkEmailRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    email_client: EmailClient = Depends(get_email_client),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> BulkEmailResponse:
    """Send an announcement to every student in the chosen audience."""
    await rate_limiter.enforce(
        f"admin:bulk_email:{admin.id}",
        limit=BULK_EMAIL_LIMIT,
        window_seconds=BULK_EMAIL_WINDOW_SECONDS,
    )

    try:
        result = await service.send_bulk_email(db, email_client, body)
        await record_audit(
            db,
            user_id=admin.id,
            action="SEND_BULK_EMAIL",
            entity="Email",
            details={
                "recipient_type": body.recipient_type.value,
                "batch_id": str(body.batch_id) if body.batch_id else None,
                "program": body.program.value if body.program else None,
                "recipient_count": result.recipient_count,
            },
            ip_address=request.client.host if request.client else None,
        )
        return result
    except CommunicationsServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        logger.exception(f"Error sending bulk email: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred.",
            },
        ) from e
