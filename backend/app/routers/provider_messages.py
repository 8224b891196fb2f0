# backend/app/routers/provider_messages.py
"""
Failed confirmation messages of the current provider.

GET  /provider/messages/failed - latest failed confirmations
POST /provider/messages/retry  - re-send failed confirmations now
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_provider
from ..database import get_db
from ..models.generated import Providers
from ..schemas.messages import FailedMessagesResponse, RetryRequest, RetryResponse
from ..services.notifications.dispatcher import NotificationDispatcher, get_dispatcher, list_failed

router = APIRouter(prefix="/provider/messages", tags=["provider"])


@router.get("/failed", response_model=FailedMessagesResponse)
def get_failed_messages(
    provider: Providers = Depends(get_current_provider),
    db: Session = Depends(get_db),
):
    failed = list_failed(db, provider.id)
    return FailedMessagesResponse(failed=failed, count=len(failed))


@router.post("/retry", response_model=RetryResponse)
async def retry_failed_messages(
    data: RetryRequest | None = None,
    provider: Providers = Depends(get_current_provider),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    data = data or RetryRequest()
    result = await dispatcher.retry_failed(
        provider_id=provider.id,
        window_hours=data.window_hours,
        limit=data.limit,
    )
    return RetryResponse(attempted=result.attempted, succeeded=result.succeeded)
