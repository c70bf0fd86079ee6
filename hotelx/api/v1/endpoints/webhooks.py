import logging
from typing import Optional

from fastapi import APIRouter, Header, Request

from hotelx.core.common_deps import PaymentGatewayDep, PaymentServiceDep
from hotelx.core.exceptions import DomainException
from hotelx.schemas.responses import WebhookAck
from hotelx.services.xendit_client import XenditError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/xendit", response_model=WebhookAck)
async def xendit_webhook(
    request: Request,
    service: PaymentServiceDep,
    gateway: PaymentGatewayDep,
    x_callback_token: Optional[str] = Header(None),
):
    """
    Xendit payment callbacks.

    Answered with 200 and ``processed``. Callbacks that cannot be applied are
    logged and dropped. Database failures surface as 5xx and are retried by
    the gateway.
    """
    if not gateway.verify_callback_token(x_callback_token):
        logger.warning("Dropping Xendit callback with invalid x-callback-token")
        return WebhookAck(processed=False)

    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Dropping Xendit callback with a non-JSON body")
        return WebhookAck(processed=False)

    try:
        event = gateway.parse_webhook(payload)
    except XenditError as exc:
        logger.warning(f"Dropping Xendit callback: {exc}")
        return WebhookAck(processed=False)

    try:
        processed = await service.handle_webhook(event)
    except DomainException as exc:
        logger.warning(
            f"Dropping Xendit callback {event.kind} for {event.reference_id}: "
            f"{exc.message}"
        )
        return WebhookAck(processed=False)
    return WebhookAck(processed=processed)
