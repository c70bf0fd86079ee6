from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from hotelx.models.payment import PaymentMethod, PaymentStatus


class PaymentBase(BaseModel):
    booking_id: int
    amount: Decimal = Field(gt=0, description="Payment amount must be greater than 0")
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    gateway_invoice_id: Optional[str] = None
    card_last_four: Optional[str] = Field(None, min_length=4, max_length=4)


class PaymentCreate(PaymentBase):
    status: PaymentStatus = PaymentStatus.UNPAID


class PaymentUpdate(BaseModel):
    status: Optional[PaymentStatus] = None
    transaction_id: Optional[str] = None
    gateway_invoice_id: Optional[str] = None
    card_last_four: Optional[str] = Field(None, min_length=4, max_length=4)
    failure_reason: Optional[str] = None


class Payment(PaymentBase):
    id: int
    status: PaymentStatus
    payment_date: Optional[datetime] = None
    failure_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CardPaymentRequest(BaseModel):
    """Card details collected by the dashboard payment modal."""

    booking_id: int
    amount: Decimal = Field(gt=0)
    payment_method: PaymentMethod
    card_number: str = Field(min_length=12, max_length=19)
    card_expiry: str = Field(description="MM/YY")
    card_cvv: str = Field(min_length=3, max_length=4)
    cardholder_name: str

    @field_validator("card_number")
    @classmethod
    def strip_card_number(cls, v: str) -> str:
        v = v.replace(" ", "")
        if not v.isdigit():
            raise ValueError("card_number must contain digits only")
        return v

    @field_validator("card_expiry")
    @classmethod
    def check_expiry(cls, v: str) -> str:
        parts = v.strip().split("/")
        if len(parts) != 2 or not all(p.isdigit() and len(p) == 2 for p in parts):
            raise ValueError("card_expiry must be in MM/YY format")
        if not 1 <= int(parts[0]) <= 12:
            raise ValueError("card_expiry month must be between 01 and 12")
        return v.strip()

    @field_validator("payment_method")
    @classmethod
    def card_method_only(cls, v: PaymentMethod) -> PaymentMethod:
        if v == PaymentMethod.BANK_TRANSFER:
            raise ValueError("bank_transfer payments go through /payments/invoice")
        return v

    @property
    def expiry_month(self) -> str:
        return self.card_expiry.split("/")[0]

    @property
    def expiry_year(self) -> str:
        return "20" + self.card_expiry.split("/")[1]

    @property
    def last_four(self) -> str:
        return self.card_number[-4:]


class InvoicePaymentRequest(BaseModel):
    booking_id: int
    amount: Decimal = Field(gt=0)
    payer_email: Optional[str] = None
    description: Optional[str] = None


class CardPaymentResponse(BaseModel):
    success: bool
    message: str
    payment: Payment


class InvoicePaymentResponse(BaseModel):
    payment: Payment
    invoice_url: Optional[str] = None


class PaymentBookingSummary(BaseModel):
    id: int
    booking_number: str
    guest_id: int
    room_id: int
    total_price: Decimal

    class Config:
        from_attributes = True


class PaymentWithDetails(Payment):
    booking: PaymentBookingSummary
