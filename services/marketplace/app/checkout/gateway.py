"""
Stripe Checkout client: async httpx calls against the Stripe REST API.

Turns an opaque Checkout Session id into a trusted ``PaymentConfirmation``
and creates new sessions for the checkout page. Stripe speaks
form-encoded requests, so nested fields are flattened to ``a[b][c]`` keys.
Every transport or HTTP failure is logged and raised as
``PaymentProviderError``; nothing here retries.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from app.config import Settings
from app.exceptions import PaymentProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentConfirmation:
    session_id: str
    payment_status: str
    amount_total: int
    currency: str
    payment_intent_id: str | None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"


@dataclass(frozen=True)
class CheckoutLineItem:
    name: str
    unit_amount: int  # minor units


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    url: str


def _flatten(prefix: str, value: Any, out: dict[str, str]) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            _flatten(f"{prefix}[{key}]", item, out)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten(f"{prefix}[{index}]", item, out)
    elif value is not None:
        out[prefix] = str(value)


def encode_form(params: dict[str, Any]) -> dict[str, str]:
    """Flatten nested params into Stripe's bracketed form encoding."""
    out: dict[str, str] = {}
    for key, value in params.items():
        _flatten(key, value, out)
    return out


def _payment_intent_id(raw: Any) -> str | None:
    # Expanded sessions return the PaymentIntent object instead of its id
    if isinstance(raw, dict):
        return raw.get("id")
    return raw


class StripeCheckoutGateway:
    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    async def _request(
        self, method: str, path: str, data: dict[str, str] | None = None
    ) -> dict:
        if not self._settings.stripe_secret_key:
            raise PaymentProviderError("Payment provider is not configured.")
        try:
            async with httpx.AsyncClient(
                base_url=self._settings.stripe_api_base,
                timeout=self._settings.stripe_timeout_secs,
                transport=self._transport,
            ) as client:
                r = await client.request(
                    method,
                    path,
                    data=data,
                    headers={"Authorization": f"Bearer {self._settings.stripe_secret_key}"},
                )
        except httpx.HTTPError as exc:
            logger.error("Stripe request %s %s failed: %s", method, path, exc)
            raise PaymentProviderError() from exc
        if r.status_code >= 400:
            logger.error("Stripe error %s on %s %s: %s", r.status_code, method, path, r.text[:300])
            raise PaymentProviderError()
        return r.json()

    async def retrieve_session(self, session_id: str) -> PaymentConfirmation:
        body = await self._request("GET", f"/checkout/sessions/{quote(session_id, safe='')}")
        return PaymentConfirmation(
            session_id=body["id"],
            payment_status=body.get("payment_status") or "unpaid",
            amount_total=body.get("amount_total") or 0,
            currency=body.get("currency") or self._settings.checkout_currency,
            payment_intent_id=_payment_intent_id(body.get("payment_intent")),
            metadata={k: str(v) for k, v in (body.get("metadata") or {}).items()},
        )

    async def create_session(
        self,
        *,
        line_items: list[CheckoutLineItem],
        metadata: dict[str, str],
        customer_email: str | None = None,
    ) -> CheckoutSession:
        params: dict[str, Any] = {
            "mode": "payment",
            "success_url": self._settings.checkout_success_url,
            "cancel_url": self._settings.checkout_cancel_url,
            "customer_email": customer_email,
            "line_items": [
                {
                    "price_data": {
                        "currency": self._settings.checkout_currency,
                        "product_data": {"name": item.name},
                        "unit_amount": item.unit_amount,
                    },
                    "quantity": 1,
                }
                for item in line_items
            ],
            "metadata": metadata,
        }
        body = await self._request("POST", "/checkout/sessions", encode_form(params))
        logger.info("Created Stripe checkout session %s (%d items)", body["id"], len(line_items))
        return CheckoutSession(session_id=body["id"], url=body["url"])
