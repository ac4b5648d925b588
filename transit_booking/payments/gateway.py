"""
Payment gateway adapter.

Requests a hosted payment link for a confirmed booking total. The
engine only depends on ``PaymentGateway.initialize``; ``PaystackGateway``
speaks Paystack's transaction-initialize endpoint over httpx.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from transit_booking.config import PaymentConfig
from transit_booking.errors import PaymentGatewayError

logger = logging.getLogger(__name__)

INITIALIZE_PATH = "/transaction/initialize"
MINOR_UNITS_PER_MAJOR = 100


@dataclass(frozen=True)
class PaymentLink:
    """Where to send the customer, and the provider's transaction reference."""
    authorization_url: str
    external_reference: str


class PaymentGateway(Protocol):
    async def initialize(
        self,
        amount: int,
        currency: str,
        reference: str,
        callback_url: str,
        metadata: dict[str, str],
        email: Optional[str] = None,
    ) -> PaymentLink: ...


def _is_retryable_status(status_code: int) -> bool:
    """429 and 5xx are worth retrying; other errors are not."""
    return status_code == 429 or 500 <= status_code < 600


def _custom_fields(metadata: dict[str, str]) -> list[dict[str, str]]:
    return [
        {
            "display_name": key.replace("_", " ").title(),
            "variable_name": key,
            "value": value,
        }
        for key, value in metadata.items()
    ]


class PaystackGateway:
    """Paystack transaction initialization client."""

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.paystack.co",
        timeout_seconds: float = 10.0,
        email_domain: str = "wa.com",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not secret_key:
            raise ValueError("Paystack secret key is required")
        self._secret_key = secret_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._email_domain = email_domain
        self._transport = transport

    @classmethod
    def from_config(cls, config: PaymentConfig) -> "PaystackGateway":
        return cls(
            secret_key=config.secret_key,
            base_url=config.base_url,
            timeout_seconds=config.timeout_seconds,
            email_domain=config.customer_email_domain,
        )

    def _fallback_email(self, metadata: dict[str, str]) -> str:
        handle = re.sub(r"[^\d]", "", metadata.get("contact_id", "")) or "customer"
        return f"{handle}@{self._email_domain}"

    async def initialize(
        self,
        amount: int,
        currency: str,
        reference: str,
        callback_url: str,
        metadata: dict[str, str],
        email: Optional[str] = None,
    ) -> PaymentLink:
        """Create a hosted checkout for ``amount`` (major units) under ``reference``.

        Raises:
            PaymentGatewayError: on transport failures, non-2xx responses, or a
                response that does not carry both a link and a reference.
        """
        payload = {
            "email": email or self._fallback_email(metadata),
            "amount": amount * MINOR_UNITS_PER_MAJOR,
            "reference": reference,
            "currency": currency,
            "callback_url": callback_url,
            "metadata": {"custom_fields": _custom_fields(metadata)},
        }
        headers = {
            "Authorization": f"Bearer {self._secret_key}",
            "Content-Type": "application/json",
        }
        logger.debug("Initializing payment for %s, amount %d %s", reference, amount, currency)

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(INITIALIZE_PATH, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            logger.error("Payment initialization timed out for %s", reference)
            raise PaymentGatewayError("Payment provider timed out", retryable=True) from exc
        except httpx.HTTPError as exc:
            logger.error("Payment initialization transport error for %s: %s", reference, type(exc).__name__)
            raise PaymentGatewayError("Payment provider unreachable", retryable=True) from exc

        if response.is_error:
            logger.error(
                "Payment initialization failed for %s with status %d",
                reference, response.status_code,
            )
            raise PaymentGatewayError(
                f"Payment provider returned {response.status_code}",
                retryable=_is_retryable_status(response.status_code),
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise PaymentGatewayError("Payment provider returned invalid JSON") from exc

        data = body.get("data") or {}
        authorization_url = data.get("authorization_url")
        external_reference = data.get("reference")
        if not body.get("status") or not authorization_url or not external_reference:
            logger.error("Payment initialization rejected for %s: %s", reference, body.get("message"))
            raise PaymentGatewayError(
                body.get("message") or "Payment provider rejected the request",
                retryable=False,
            )

        logger.info("Payment link issued for %s (%s)", reference, external_reference)
        return PaymentLink(authorization_url=authorization_url, external_reference=external_reference)
