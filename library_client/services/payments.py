"""Late-fee payment endpoints."""

from __future__ import annotations

from typing import Any

from library_client.exceptions import PaymentError
from library_client.http import ApiClient
from library_client.models import CheckoutSession, PaymentProvider

_CHECKOUT_PATHS = {
    PaymentProvider.STRIPE: "/payments/create-late-fee-checkout",
    PaymentProvider.IYZICO: "/payments/iyzico/create-late-fee-checkout",
}


class PaymentService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def create_checkout(
        self,
        loan_id: str,
        provider: PaymentProvider = PaymentProvider.STRIPE,
    ) -> CheckoutSession:
        """Create a gateway checkout for a loan's late fee."""
        body = self.api.post(_CHECKOUT_PATHS[provider], json={"loanId": loan_id}) or {}
        url = body.get("url") or body.get("paymentPageUrl")
        if not body.get("success", True) or not url:
            raise PaymentError("Unable to create payment page")
        return CheckoutSession(
            loan_id=loan_id,
            provider=provider,
            url=url,
            session_id=body.get("sessionId") or body.get("token"),
        )

    def confirm(self, loan_id: str, expire_session: bool = True) -> Any:
        """Confirm a completed gateway payment for ``loan_id``."""
        return self.api.post(
            "/payments/confirm-late-fee-payment",
            json={"loanId": loan_id},
            expire_session=expire_session,
        )
