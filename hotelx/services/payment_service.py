"""
Payment recording and reconciliation.

Every payment write runs inside the booking's critical section (and then the
booking's room section) so the booking cascade cannot interleave with a
lifecycle change on the same booking. Gateway calls happen before the section
is entered; only the recording of their outcome is serialized.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hotelx.core.config import settings
from hotelx.core.exceptions import (
    BookingNotFound,
    InvalidStatusTransition,
    PaymentGatewayError,
    PaymentNotFound,
)
from hotelx.core.locks import KeyedLock, booking_key, room_key
from hotelx.models.booking import Booking, BookingStatus
from hotelx.models.payment import Payment, PaymentMethod, PaymentStatus
from hotelx.schemas.payment import (
    CardPaymentRequest,
    InvoicePaymentRequest,
    PaymentCreate,
    PaymentUpdate,
)
from hotelx.services.xendit_client import WebhookEvent, XenditClient, XenditError

logger = logging.getLogger(__name__)

_3DS_PENDING_STATUS = "IN_REVIEW"
_FAILED_CHARGE_STATUSES = ("FAILED", "REVERSED", "VOIDED")


def apply_payment_status(
    payment: Payment, booking: Booking, target: PaymentStatus
) -> bool:
    """
    Move a payment to ``target`` and cascade a first payment to the booking.

    Entering ``paid`` stamps payment_date and confirms a ``new`` booking, once.
    Repeating ``paid`` is a no-op. Returns True when the payment changed.

    Raises:
        InvalidStatusTransition: If a paid payment is moved to another status
    """
    if payment.status == target:
        return False
    if payment.status == PaymentStatus.PAID:
        raise InvalidStatusTransition("Payment", payment.status.value, target.value)

    payment.status = target
    if target == PaymentStatus.PAID:
        payment.payment_date = datetime.utcnow()
        if booking.status == BookingStatus.NEW:
            booking.status = BookingStatus.CONFIRMED
            logger.info(f"Booking {booking.booking_number} confirmed by payment")
        elif booking.status == BookingStatus.CANCELLED:
            logger.warning(
                f"Payment received for cancelled booking {booking.booking_number}"
            )
    return True


class PaymentService:
    def __init__(self, db: AsyncSession, locks: KeyedLock, gateway: XenditClient):
        self.db = db
        self.locks = locks
        self.gateway = gateway

    @staticmethod
    def _details_query():
        return select(Payment).options(selectinload(Payment.booking))

    @asynccontextmanager
    async def _booking_section(self, booking_id: int):
        """Hold the booking key, then its room key; yields the fresh booking."""
        async with self.locks.hold(booking_key(booking_id)):
            booking = await self._load_booking(booking_id)
            async with self.locks.hold(room_key(booking.room_id)):
                yield await self._load_booking(booking_id)

    async def _load_booking(self, booking_id: int) -> Booking:
        stmt = (
            select(Booking)
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        booking = (await self.db.execute(stmt)).scalar_one_or_none()
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    async def _reload(self, payment_id: int) -> Payment:
        stmt = (
            self._details_query()
            .where(Payment.id == payment_id)
            .execution_options(populate_existing=True)
        )
        return (await self.db.execute(stmt)).scalar_one()

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[PaymentStatus] = None,
    ) -> List[Payment]:
        stmt = select(Payment).order_by(Payment.id).offset(skip).limit(limit)
        if status is not None:
            stmt = stmt.where(Payment.status == status)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_all_with_details(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[PaymentStatus] = None,
    ) -> List[Payment]:
        stmt = self._details_query().order_by(Payment.id).offset(skip).limit(limit)
        if status is not None:
            stmt = stmt.where(Payment.status == status)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        stmt = self._details_query().where(Payment.id == payment_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_transaction_id(self, transaction_id: str) -> Optional[Payment]:
        stmt = select(Payment).where(Payment.transaction_id == transaction_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_invoice_id(self, invoice_id: str) -> Optional[Payment]:
        stmt = select(Payment).where(Payment.gateway_invoice_id == invoice_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_booking(self, booking_id: int) -> List[Payment]:
        stmt = (
            select(Payment).where(Payment.booking_id == booking_id).order_by(Payment.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _record(
        self,
        booking_id: int,
        status: PaymentStatus,
        **fields,
    ) -> Payment:
        """Insert a payment row and apply its status inside the booking section."""
        async with self._booking_section(booking_id) as booking:
            payment = Payment(
                booking_id=booking.id, status=PaymentStatus.UNPAID, **fields
            )
            self.db.add(payment)
            apply_payment_status(payment, booking, status)
            await self.db.commit()

        logger.info(
            f"Payment {payment.id} recorded for booking {booking.booking_number}: "
            f"{payment.status.value} {payment.amount}"
        )
        return await self._reload(payment.id)

    async def create(self, payment_data: PaymentCreate) -> Payment:
        return await self._record(
            payment_data.booking_id,
            payment_data.status,
            **payment_data.model_dump(exclude={"booking_id", "status"}),
        )

    async def update(self, payment_id: int, payment_data: PaymentUpdate) -> Payment:
        current = await self.get_by_id(payment_id)
        if current is None:
            raise PaymentNotFound(payment_id)

        update_data = payment_data.model_dump(exclude_unset=True)
        target = update_data.pop("status", None)

        async with self._booking_section(current.booking_id) as booking:
            payment = await self._reload(payment_id)
            if target is not None:
                changed = apply_payment_status(payment, booking, target)
                if changed:
                    logger.info(f"Payment {payment_id} -> {target.value}")
            for field, value in update_data.items():
                setattr(payment, field, value)
            await self.db.commit()

        return await self._reload(payment_id)

    def _charge_card(self, request: CardPaymentRequest, external_id: str) -> dict:
        """Tokenize, authenticate, charge and capture. Runs in a worker thread."""
        token = self.gateway.create_card_token(
            card_number=request.card_number,
            exp_month=request.expiry_month,
            exp_year=request.expiry_year,
            card_cvn=request.card_cvv,
        )
        authentication = self.gateway.create_3ds_authentication(
            token_id=token["id"], amount=request.amount, card_cvn=request.card_cvv
        )
        auth_status = authentication.get("status")
        if auth_status == _3DS_PENDING_STATUS:
            raise XenditError("3-D Secure authentication awaits payer verification")
        if auth_status != "VERIFIED":
            raise XenditError(
                f"3-D Secure authentication {(auth_status or 'missing').lower()}"
            )

        charge = self.gateway.create_charge(
            token_id=token["id"],
            external_id=external_id,
            amount=request.amount,
            authentication_id=authentication.get("id"),
            card_cvn=request.card_cvv,
        )
        charge_status = charge.get("status")
        if charge_status in _FAILED_CHARGE_STATUSES:
            reason = charge.get("failure_reason") or charge_status
            raise XenditError(f"Charge declined: {reason}")
        if charge_status == "AUTHORIZED":
            capture = self.gateway.capture_charge(
                charge_id=charge["id"], amount=request.amount
            )
            charge_status = capture.get("status", charge_status)
        return {"id": charge["id"], "status": charge_status}

    async def process_card_payment(
        self, request: CardPaymentRequest
    ) -> Tuple[Payment, str]:
        """
        Run a card payment through the gateway and record its outcome.

        Returns the recorded payment and a message for the operator. A capture
        the gateway has not confirmed yet is recorded as ``processing`` and is
        settled later by the capture webhook.

        Raises:
            BookingNotFound: If the booking does not exist
            PaymentGatewayError: After recording a failed payment
        """
        booking = await self._load_booking(request.booking_id)
        external_id = f"{booking.booking_number}-{uuid.uuid4().hex[:8]}"
        logger.info(
            f"Card payment {external_id}: {request.amount} via "
            f"{request.payment_method.value} ****{request.last_four}"
        )

        try:
            charge = await run_in_threadpool(self._charge_card, request, external_id)
        except XenditError as exc:
            payment = await self._record(
                request.booking_id,
                PaymentStatus.FAILED,
                amount=request.amount,
                payment_method=request.payment_method,
                card_last_four=request.last_four,
                failure_reason=str(exc),
            )
            logger.warning(f"Card payment {external_id} failed: {exc}")
            raise PaymentGatewayError(f"Payment failed: {exc}", payment.id)

        status = (
            PaymentStatus.PAID if charge["status"] == "CAPTURED" else PaymentStatus.PROCESSING
        )
        payment = await self._record(
            request.booking_id,
            status,
            amount=request.amount,
            payment_method=request.payment_method,
            card_last_four=request.last_four,
            transaction_id=charge["id"],
        )
        if status == PaymentStatus.PAID:
            return payment, "Payment processed successfully"
        return payment, "Payment submitted and awaiting capture confirmation"

    async def create_invoice_payment(
        self, request: InvoicePaymentRequest
    ) -> Tuple[Payment, Optional[str]]:
        """Open a hosted invoice; the payment stays processing until its webhook."""
        stmt = (
            select(Booking)
            .options(selectinload(Booking.guest))
            .where(Booking.id == request.booking_id)
        )
        booking = (await self.db.execute(stmt)).scalar_one_or_none()
        if booking is None:
            raise BookingNotFound(request.booking_id)

        external_id = f"{booking.booking_number}-{uuid.uuid4().hex[:8]}"
        description = request.description or f"Hotel booking {booking.booking_number}"
        try:
            invoice = await run_in_threadpool(
                lambda: self.gateway.create_invoice(
                    external_id=external_id,
                    amount=request.amount,
                    payer_email=request.payer_email or booking.guest.email,
                    description=description,
                    success_redirect_url=settings.INVOICE_SUCCESS_REDIRECT_URL or None,
                    failure_redirect_url=settings.INVOICE_FAILURE_REDIRECT_URL or None,
                )
            )
        except XenditError as exc:
            payment = await self._record(
                request.booking_id,
                PaymentStatus.FAILED,
                amount=request.amount,
                payment_method=PaymentMethod.BANK_TRANSFER,
                failure_reason=str(exc),
            )
            logger.warning(f"Invoice {external_id} failed: {exc}")
            raise PaymentGatewayError(f"Invoice creation failed: {exc}", payment.id)

        payment = await self._record(
            request.booking_id,
            PaymentStatus.PROCESSING,
            amount=request.amount,
            payment_method=PaymentMethod.BANK_TRANSFER,
            gateway_invoice_id=invoice["id"],
        )
        return payment, invoice.get("invoice_url")

    async def handle_webhook(self, event: WebhookEvent) -> bool:
        """
        Apply a gateway callback to the payment it refers to.

        Returns True when a payment changed. Unknown event kinds, unknown
        references and callbacks that would move a paid payment are logged
        and dropped.
        """
        if not event.is_known:
            logger.info(f"Ignoring webhook {event.kind} for {event.reference_id}")
            return False

        if event.reference_type == "invoice":
            payment = await self.get_by_invoice_id(event.reference_id)
        else:
            payment = await self.get_by_transaction_id(event.reference_id)
        if payment is None:
            logger.warning(
                f"Dropping webhook {event.kind}: no payment for {event.reference_id}"
            )
            return False

        target = PaymentStatus(event.status)
        async with self._booking_section(payment.booking_id) as booking:
            payment = await self._reload(payment.id)
            if payment.status == PaymentStatus.PAID and target != PaymentStatus.PAID:
                logger.warning(
                    f"Dropping webhook {event.kind}: payment {payment.id} already paid"
                )
                return False
            changed = apply_payment_status(payment, booking, target)
            if changed and target == PaymentStatus.FAILED:
                payment.failure_reason = f"Gateway reported {event.kind}"
            await self.db.commit()

        logger.info(
            f"Webhook {event.kind} applied to payment {payment.id}: "
            f"{'updated' if changed else 'no change'}"
        )
        return changed
