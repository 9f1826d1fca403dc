# server/askbudi/routes/billing.py
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from askbudi.billing import process_webhook_event
from askbudi.database import get_db
from askbudi.schemas import WebhookAck, WebhookEvent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/billing", tags=["billing"])


@router.post("/webhook", response_model=WebhookAck)
async def billing_webhook(request: Request, db: Session = Depends(get_db)):
    """Receive billing provider events.

    Always acknowledged, even when the body is unusable or processing fails,
    so the provider does not keep redelivering.
    """
    try:
        event = WebhookEvent.model_validate(await request.json())
    except ValueError:
        logger.warning("Ignoring malformed billing webhook body", exc_info=True)
        return WebhookAck()

    logger.info("Billing webhook received: %s for %s", event.event_type, event.customer_id)
    process_webhook_event(db, event.event_type, event.customer_id, event.data)
    return WebhookAck()
