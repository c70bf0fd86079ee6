"""
Xendit REST client.

Synchronous on purpose: the payment service runs every call in FastAPI's
threadpool and each request is bounded by ``XenditConfig.timeout``.
"""

import hmac
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

import requests

logger = logging.getLogger(__name__)

# Webhook event kinds understood by the payment service
INVOICE_PAID = "invoice.paid"
INVOICE_EXPIRED = "invoice.expired"
CHARGE_CAPTURED = "credit_card_charge.capture.succeeded"
CHARGE_FAILED = "credit_card_charge.capture.failed"

_EVENT_OUTCOMES = {
    INVOICE_PAID: ("invoice", "paid"),
    INVOICE_EXPIRED: ("invoice", "failed"),
    CHARGE_CAPTURED: ("charge", "paid"),
    CHARGE_FAILED: ("charge", "failed"),
}

# Invoice callbacks carry no event name, only the invoice status
_INVOICE_STATUS_EVENTS = {
    "PAID": INVOICE_PAID,
    "SETTLED": INVOICE_PAID,
    "EXPIRED": INVOICE_EXPIRED,
}


@dataclass
class XenditConfig:
    api_url: str            # https://api.xendit.co
    secret_key: str         # used as the basic-auth username
    webhook_token: str = "" # x-callback-token configured in the dashboard
    timeout: int = 25
    currency: str = "IDR"


@dataclass
class WebhookEvent:
    kind: str
    reference_id: str
    reference_type: Optional[str] = None  # "invoice" or "charge"
    status: Optional[str] = None          # "paid", "failed" or None when unknown

    @property
    def is_known(self) -> bool:
        return self.status is not None


class XenditError(RuntimeError):
    pass


def mask_card_number(card_number: str) -> str:
    return "*" * max(len(card_number) - 4, 0) + card_number[-4:]


def _amount(value) -> float:
    if isinstance(value, Decimal):
        return float(value)
    return value


class XenditClient:
    def __init__(self, cfg: XenditConfig):
        self.cfg = cfg

    def request(self, method: str, path: str, payload: Optional[dict] = None) -> dict:
        url = f"{self.cfg.api_url.rstrip('/')}{path}"
        try:
            r = requests.request(
                method=method.upper(),
                url=url,
                json=payload,
                auth=(self.cfg.secret_key, ""),
                headers={"Accept": "application/json"},
                timeout=self.cfg.timeout,
            )
        except requests.Timeout:
            raise XenditError(f"Xendit request timed out after {self.cfg.timeout}s")
        except requests.RequestException as exc:
            raise XenditError(f"Xendit request failed: {exc}")

        try:
            data = r.json() if r.text else {}
        except ValueError:
            data = {"raw": r.text}
        if r.status_code >= 400:
            message = data.get("message") if isinstance(data, dict) else None
            raise XenditError(f"Xendit {r.status_code}: {message or data}")
        if not isinstance(data, dict) or "raw" in data:
            raise XenditError(f"Xendit {r.status_code}: response is not a JSON object")
        return data

    @staticmethod
    def _expect_id(data, operation: str) -> dict:
        if not isinstance(data, dict) or not data.get("id"):
            raise XenditError(f"Xendit {operation} response has no id")
        return data

    def create_card_token(
        self, *, card_number: str, exp_month: str, exp_year: str, card_cvn: str
    ) -> dict:
        logger.info(f"Tokenizing card {mask_card_number(card_number)}")
        payload = {
            "card_data": {
                "account_number": card_number,
                "exp_month": exp_month,
                "exp_year": exp_year,
            },
            "card_cvn": card_cvn,
            "is_multiple_use": False,
        }
        return self._expect_id(
            self.request("POST", "/credit_card_tokens", payload), "card token"
        )

    def create_3ds_authentication(self, *, token_id: str, amount, card_cvn: str) -> dict:
        payload = {
            "token_id": token_id,
            "amount": _amount(amount),
            "card_cvn": card_cvn,
            "currency": self.cfg.currency,
        }
        return self.request(
            "POST", f"/credit_card_tokens/{token_id}/authentications", payload
        )

    def create_charge(
        self,
        *,
        token_id: str,
        external_id: str,
        amount,
        authentication_id: Optional[str] = None,
        card_cvn: Optional[str] = None,
    ) -> dict:
        logger.info(f"Creating card charge {external_id} for {amount} {self.cfg.currency}")
        payload = {
            "token_id": token_id,
            "external_id": external_id,
            "amount": _amount(amount),
            "currency": self.cfg.currency,
            "capture": False,
        }
        if authentication_id:
            payload["authentication_id"] = authentication_id
        if card_cvn:
            payload["card_cvn"] = card_cvn
        return self._expect_id(
            self.request("POST", "/credit_card_charges", payload), "charge"
        )

    def capture_charge(self, *, charge_id: str, amount) -> dict:
        logger.info(f"Capturing charge {charge_id} for {amount}")
        payload = {"amount": _amount(amount)}
        return self._expect_id(
            self.request("POST", f"/credit_card_charges/{charge_id}/capture", payload),
            "capture",
        )

    def create_invoice(
        self,
        *,
        external_id: str,
        amount,
        payer_email: Optional[str],
        description: str,
        success_redirect_url: Optional[str] = None,
        failure_redirect_url: Optional[str] = None,
    ) -> dict:
        logger.info(f"Creating invoice {external_id} for {amount} {self.cfg.currency}")
        payload = {
            "external_id": external_id,
            "amount": _amount(amount),
            "description": description,
            "currency": self.cfg.currency,
        }
        if payer_email:
            payload["payer_email"] = payer_email
        if success_redirect_url:
            payload["success_redirect_url"] = success_redirect_url
        if failure_redirect_url:
            payload["failure_redirect_url"] = failure_redirect_url
        return self._expect_id(
            self.request("POST", "/v2/invoices", payload), "invoice"
        )

    def verify_callback_token(self, token: Optional[str]) -> bool:
        """Check the x-callback-token header; no configured token accepts every callback."""
        expected = self.cfg.webhook_token
        if not expected:
            return True
        return hmac.compare_digest(expected.encode(), (token or "").encode())

    def parse_webhook(self, payload: dict) -> WebhookEvent:
        """
        Normalize a callback body.

        Accepts both the ``{"event": ..., "data": {...}}`` envelope and the bare
        invoice callback, which only carries the invoice ``status``.
        """
        if not isinstance(payload, dict):
            raise XenditError("Webhook payload must be a JSON object")

        if "event" in payload:
            kind = str(payload["event"])
            data = payload.get("data") or {}
        else:
            kind = _INVOICE_STATUS_EVENTS.get(str(payload.get("status", "")).upper(), "")
            data = payload

        reference_id = data.get("id") if isinstance(data, dict) else None
        if not reference_id:
            raise XenditError(f"Webhook {kind or 'callback'} has no reference id")

        reference_type, status = _EVENT_OUTCOMES.get(kind, (None, None))
        return WebhookEvent(
            kind=kind or "unknown",
            reference_id=str(reference_id),
            reference_type=reference_type,
            status=status,
        )


class XenditSandboxClient(XenditClient):
    """Answers every call locally with the responses a healthy gateway would send."""

    def request(self, method: str, path: str, payload: Optional[dict] = None) -> dict:
        payload = payload or {}
        suffix = uuid.uuid4().hex[:10]
        logger.info(f"[sandbox] {method.upper()} {path}")

        if path.endswith("/authentications"):
            return {
                "id": f"auth_{suffix}",
                "status": "VERIFIED",
                "authenticated_amount": payload.get("amount"),
                "currency": self.cfg.currency,
            }
        if path == "/credit_card_tokens":
            number = payload.get("card_data", {}).get("account_number", "")
            return {
                "id": f"token_{suffix}",
                "status": "VERIFIED",
                "masked_card_number": mask_card_number(number),
            }
        if path.endswith("/capture"):
            return {
                "id": path.split("/")[-2],
                "status": "CAPTURED",
                "captured_amount": payload.get("amount"),
            }
        if path == "/credit_card_charges":
            return {
                "id": f"charge_{suffix}",
                "external_id": payload.get("external_id"),
                "status": "AUTHORIZED",
                "authorized_amount": payload.get("amount"),
                "currency": self.cfg.currency,
            }
        if path == "/v2/invoices":
            invoice_id = f"inv_{suffix}"
            expiry = datetime.now(timezone.utc) + timedelta(days=1)
            return {
                "id": invoice_id,
                "external_id": payload.get("external_id"),
                "amount": payload.get("amount"),
                "status": "PENDING",
                "invoice_url": f"https://checkout-staging.xendit.co/web/{invoice_id}",
                "expiry_date": expiry.isoformat(),
            }
        raise XenditError(f"Sandbox has no response for {method.upper()} {path}")


def build_gateway(settings) -> XenditClient:
    cfg = XenditConfig(
        api_url=settings.XENDIT_API_URL,
        secret_key=settings.XENDIT_SECRET_KEY,
        webhook_token=settings.XENDIT_WEBHOOK_TOKEN,
        timeout=settings.XENDIT_TIMEOUT,
        currency=settings.PAYMENT_CURRENCY,
    )
    if settings.XENDIT_SANDBOX or not settings.XENDIT_SECRET_KEY:
        logger.warning("Xendit secret key not configured or sandbox enabled: using simulated gateway")
        return XenditSandboxClient(cfg)
    return XenditClient(cfg)
