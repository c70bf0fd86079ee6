from typing import List, Optional

from fastapi import APIRouter, Query

from hotelx.core.common_deps import CurrentUserDep, PaymentServiceDep, StaffUserDep
from hotelx.core.exceptions import PaymentNotFound
from hotelx.models.payment import PaymentStatus
from hotelx.schemas.payment import (
    CardPaymentRequest,
    CardPaymentResponse,
    InvoicePaymentRequest,
    InvoicePaymentResponse,
    PaymentCreate,
    PaymentUpdate,
    PaymentWithDetails,
)

router = APIRouter()


@router.get("/", response_model=List[PaymentWithDetails])
async def get_payments(
    service: PaymentServiceDep,
    current_user: CurrentUserDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    status: Optional[PaymentStatus] = Query(
        None, description="Filter by payment status"
    ),
):
    return await service.get_all_with_details(skip, limit, status)


@router.post("/", response_model=PaymentWithDetails, status_code=201)
async def create_payment(
    payment_data: PaymentCreate,
    service: PaymentServiceDep,
    current_user: StaffUserDep,
):
    """Record a payment taken outside the gateway (cash desk, manual transfer)"""
    return await service.create(payment_data)


# Gateway flows, declared before /{payment_id}
@router.post("/process", response_model=CardPaymentResponse)
async def process_card_payment(
    payment_request: CardPaymentRequest,
    service: PaymentServiceDep,
    current_user: StaffUserDep,
):
    """Charge a card through Xendit (tokenize, 3-D Secure, charge, capture)"""
    payment, message = await service.process_card_payment(payment_request)
    return CardPaymentResponse(success=True, message=message, payment=payment)


@router.post("/invoice", response_model=InvoicePaymentResponse, status_code=201)
async def create_invoice_payment(
    invoice_request: InvoicePaymentRequest,
    service: PaymentServiceDep,
    current_user: StaffUserDep,
):
    """Open a hosted Xendit invoice for bank transfer payment"""
    payment, invoice_url = await service.create_invoice_payment(invoice_request)
    return InvoicePaymentResponse(payment=payment, invoice_url=invoice_url)


@router.get("/{payment_id}", response_model=PaymentWithDetails)
async def get_payment(
    payment_id: int,
    service: PaymentServiceDep,
    current_user: CurrentUserDep,
):
    payment = await service.get_by_id(payment_id)
    if payment is None:
        raise PaymentNotFound(payment_id)
    return payment


@router.put("/{payment_id}", response_model=PaymentWithDetails)
async def update_payment(
    payment_id: int,
    payment_data: PaymentUpdate,
    service: PaymentServiceDep,
    current_user: StaffUserDep,
):
    return await service.update(payment_id, payment_data)
