from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import stripe

from tuition_app.config import get_settings
from tuition_app.logger import logger

class PaymentGatewayError(Exception):
    """Raised when the payment gateway rejects or fails a call."""

@dataclass
class CheckoutSession:
    """The parts of a checkout session the payment workflow reads."""
    id: str
    url: Optional[str]
    paid: bool
    application_id: Optional[str]
    transaction_id: Optional[str]
    amount: float
    customer_email: Optional[str]

class PaymentGateway:
    """
    Stripe Checkout wrapper.

    Attributes:
        api_key (str): Stripe secret key
        site_domain (str): Frontend origin used to build the success and cancel URLs
        currency (str): ISO currency code charged in
    """

    def __init__(self, api_key: str, site_domain: str, currency: str):
        self.api_key = api_key
        self.site_domain = site_domain.rstrip("/")
        self.currency = currency

    def create_checkout_session(self, application_id: str, amount: float, tutor_name: Optional[str], student_email: Optional[str]) -> CheckoutSession:
        """
        Open a one-off card payment for hiring a tutor.

        Args:
            application_id (str): Application being paid for, echoed back in the session metadata
            amount (float): Amount in major currency units
            tutor_name (str): Shown on the checkout page
            student_email (str): Prefilled customer email

        Returns:
            CheckoutSession: The created session, its url is where the client should be sent
        """
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                payment_method_types=["card"],
                line_items=[{
                    "price_data": {
                        "currency": self.currency,
                        "unit_amount": int(amount * 100), # Stripe uses the smallest currency unit
                        "product_data": {"name": f"Hire Tutor: {tutor_name}"},
                    },
                    "quantity": 1,
                }],
                mode="payment",
                customer_email=student_email,
                metadata={"applicationId": application_id},
                success_url=f"{self.site_domain}/dashboard/student/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{self.site_domain}/dashboard/student/payment-cancelled",
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe error creating checkout session: {e.user_message or str(e)}")
            raise PaymentGatewayError(e.user_message or str(e)) from e
        return self._to_checkout_session(session)

    def retrieve_session(self, session_id: str) -> CheckoutSession:
        """Fetch a checkout session by id."""
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.api_key)
        except stripe.StripeError as e:
            logger.error(f"Stripe error retrieving session {session_id}: {e.user_message or str(e)}")
            raise PaymentGatewayError(e.user_message or str(e)) from e
        return self._to_checkout_session(session)

    @staticmethod
    def _to_checkout_session(session) -> CheckoutSession:
        metadata = session.metadata or {}
        return CheckoutSession(
            id=session.id,
            url=session.url,
            paid=session.payment_status == "paid",
            application_id=metadata.get("applicationId"),
            transaction_id=session.payment_intent,
            amount=(session.amount_total or 0) / 100,
            customer_email=session.customer_email,
        )

@lru_cache()
def get_payment_gateway() -> PaymentGateway:
    """Dependency returning the configured payment gateway."""
    settings = get_settings()
    return PaymentGateway(settings.stripe_secret_key, settings.site_domain, settings.payment_currency)
