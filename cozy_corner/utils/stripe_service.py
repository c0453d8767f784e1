# Path: cozy_corner/utils/stripe_service.py
import logging
from typing import Optional

import stripe

from ..config import settings
from .exceptions import InvalidSignature, PaymentProviderError

logger = logging.getLogger(__name__)

stripe.api_key = settings.STRIPE_SECRET_KEY or ""


class StripeService:
    """Thin wrapper around the Stripe API used by the payment routes"""

    @staticmethod
    def _api_key() -> str:
        if not settings.STRIPE_SECRET_KEY:
            logger.error("Stripe secret key is not configured")
            raise PaymentProviderError("Payments are not configured")
        return settings.STRIPE_SECRET_KEY

    @staticmethod
    def create_payment_intent(
        amount_cents: int,
        currency: Optional[str] = None,
        metadata: Optional[dict] = None,
        description: Optional[str] = None,
    ):
        """
        Open a payment intent.

        Args:
            amount_cents: Amount in minor currency units
            currency: ISO currency code, defaults to STRIPE_CURRENCY
            metadata: Extra key/values stored on the intent
            description: Human readable description

        Returns:
            The Stripe PaymentIntent (has .id and .client_secret)
        """
        try:
            return stripe.PaymentIntent.create(
                amount=amount_cents,
                currency=currency or settings.STRIPE_CURRENCY,
                automatic_payment_methods={"enabled": True},
                metadata=metadata or {},
                description=description,
                api_key=StripeService._api_key(),
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe payment intent error: {e}")
            raise PaymentProviderError("Error creating payment intent")

    @staticmethod
    def retrieve_payment_intent(payment_intent_id: str):
        try:
            return stripe.PaymentIntent.retrieve(
                payment_intent_id, api_key=StripeService._api_key())
        except stripe.StripeError as e:
            logger.error(f"Stripe retrieve payment error: {e}")
            raise PaymentProviderError("Error verifying payment")

    @staticmethod
    def create_refund(payment_intent_id: str, amount_cents: Optional[int] = None):
        params = {"payment_intent": payment_intent_id}
        if amount_cents is not None:
            params["amount"] = amount_cents
        try:
            return stripe.Refund.create(api_key=StripeService._api_key(), **params)
        except stripe.StripeError as e:
            logger.error(f"Stripe refund error: {e}")
            raise PaymentProviderError("Error refunding payment")

    @staticmethod
    def construct_event(payload: bytes, signature: Optional[str]):
        """
        Verify a webhook payload against STRIPE_WEBHOOK_SECRET.
        Fails closed: any verification problem raises InvalidSignature.
        """
        secret = settings.STRIPE_WEBHOOK_SECRET
        if not secret or not signature:
            logger.warning("Webhook rejected: missing signature or webhook secret")
            raise InvalidSignature()
        try:
            return stripe.Webhook.construct_event(payload, signature, secret)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise InvalidSignature()
        except ValueError as e:
            logger.warning(f"Webhook payload is not valid JSON: {e}")
            raise InvalidSignature("Invalid webhook payload")
