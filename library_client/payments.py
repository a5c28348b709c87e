"""Redirect-based late-fee payment confirmation.

The gateway page lives outside the application, so the loan being paid is
remembered in durable storage before the redirect and matched up again
when the gateway sends the user back with a ``payment`` signal.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from library_client.exceptions import InvalidEntityStateError, LibraryClientError
from library_client.models import CheckoutSession, PaymentProvider, PaymentSignal, PaymentState
from library_client.notifications import Notification, Notifier
from library_client.services.payments import PaymentService
from library_client.storage import PENDING_PAYMENT_KEY, MemoryStorage, read_clean
from library_client.store import LibraryDataStore

logger = logging.getLogger(__name__)

LATE_FEES_ROUTE = "/late-fees"

CONFIRMED_MESSAGE = "Payment successful! Your late fee has been paid."
CONFIRM_FAILED_MESSAGE = (
    "Your payment was probably received, but we could not confirm it. "
    "Please refresh the page in a moment."
)
CANCELED_MESSAGE = "Payment was canceled."


@dataclass(frozen=True)
class PendingPayment:
    loan_id: str
    provider: PaymentProvider = PaymentProvider.STRIPE
    started_at: str | None = None


@dataclass(frozen=True)
class PaymentOutcome:
    """Where the flow ended and where to navigate next.

    Navigation is always in-app (``replace=True``, ``full_reload=False``).
    """

    state: PaymentState
    notification: Notification | None = None
    confirmed_loan_id: str | None = None
    redirect_to: str = LATE_FEES_ROUTE
    replace: bool = True
    full_reload: bool = False


class PaymentConfirmationFlow:
    """Correlates a gateway return with the loan whose fee was being paid.

    Parameters
    ----------
    payments : PaymentService
        Checkout and confirmation endpoints.
    storage : MemoryStorage
        Durable storage holding the pending-payment marker.
    notifier : Notifier
        Receives the outcome toasts.
    store : LibraryDataStore | None
        Local cache; a confirmed loan is marked paid in it when given.
    """

    def __init__(
        self,
        payments: PaymentService,
        storage: MemoryStorage,
        notifier: Notifier,
        store: LibraryDataStore | None = None,
    ) -> None:
        self.payments = payments
        self.storage = storage
        self.notifier = notifier
        self.store = store
        self.state = PaymentState.IDLE

    @property
    def pending(self) -> PendingPayment | None:
        return self._read_marker()

    def begin(self, loan_id: str, provider: PaymentProvider = PaymentProvider.STRIPE) -> CheckoutSession:
        """Create the checkout and persist the marker; returns the page to redirect to.

        A newer ``begin`` replaces the marker of an abandoned one.
        """
        checkout = self.payments.create_checkout(loan_id, provider)
        marker = {
            "loanId": loan_id,
            "provider": provider.value,
            "startedAt": datetime.now(timezone.utc).isoformat(),
        }
        self.storage.set(PENDING_PAYMENT_KEY, json.dumps(marker))
        self.state = PaymentState.REDIRECTING
        logger.info("Redirecting to %s checkout for loan %s", provider.value, loan_id)
        return checkout

    def handle_return(self, signal: PaymentSignal | str | None) -> PaymentOutcome:
        """Process the return from the gateway.

        ``signal`` is the ``payment`` query value (``success`` / ``canceled``)
        or ``None`` when the user came back without one.
        """
        signal = _parse_signal(signal)
        pending = self._read_marker()

        if signal == PaymentSignal.CANCELED:
            self._clear_marker()
            logger.info("Payment canceled%s", f" for loan {pending.loan_id}" if pending else "")
            return self._finish(PaymentState.IDLE, self.notifier.info(CANCELED_MESSAGE))

        if pending is None:
            if signal == PaymentSignal.SUCCESS:
                logger.warning("Payment success signal without a pending payment; nothing to confirm")
            return self._finish(PaymentState.IDLE)

        if signal is None:
            self._clear_marker()
            logger.info("Discarded stale payment marker for loan %s", pending.loan_id)
            return self._finish(PaymentState.IDLE)

        return self._confirm(pending)

    def _confirm(self, pending: PendingPayment) -> PaymentOutcome:
        # Cleared before the call: a failure here must never lead to a second confirmation.
        self._clear_marker()
        self.state = PaymentState.AWAITING_CONFIRMATION
        try:
            self.payments.confirm(pending.loan_id, expire_session=False)
        except LibraryClientError as exc:
            logger.error("Payment confirmation failed for loan %s: %s", pending.loan_id, exc)
            return self._finish(PaymentState.CONFIRM_FAILED, self.notifier.warning(CONFIRM_FAILED_MESSAGE))

        self._mark_paid_locally(pending)
        logger.info("Late fee payment confirmed for loan %s", pending.loan_id)
        return self._finish(
            PaymentState.CONFIRMED,
            self.notifier.success(CONFIRMED_MESSAGE),
            confirmed_loan_id=pending.loan_id,
        )

    def _mark_paid_locally(self, pending: PendingPayment) -> None:
        if self.store is None or pending.loan_id not in self.store.loans:
            return
        try:
            self.store.mark_fee_paid(pending.loan_id, pending.provider.value, datetime.now(timezone.utc))
        except InvalidEntityStateError as exc:
            logger.warning("Local loan %s not updated: %s", pending.loan_id, exc)

    def _finish(
        self,
        state: PaymentState,
        notification: Notification | None = None,
        confirmed_loan_id: str | None = None,
    ) -> PaymentOutcome:
        outcome = PaymentOutcome(state=state, notification=notification, confirmed_loan_id=confirmed_loan_id)
        # Terminal states are reported once; the flow is ready for the next payment.
        self.state = PaymentState.IDLE
        return outcome

    def _read_marker(self) -> PendingPayment | None:
        raw = read_clean(self.storage, PENDING_PAYMENT_KEY)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            # Older clients stored the bare loan id.
            return PendingPayment(loan_id=raw)
        if not isinstance(data, dict) or not data.get("loanId"):
            return PendingPayment(loan_id=str(data))
        try:
            provider = PaymentProvider(data.get("provider", PaymentProvider.STRIPE.value))
        except ValueError:
            provider = PaymentProvider.STRIPE
        return PendingPayment(loan_id=str(data["loanId"]), provider=provider, started_at=data.get("startedAt"))

    def _clear_marker(self) -> None:
        self.storage.remove(PENDING_PAYMENT_KEY)


def _parse_signal(signal: PaymentSignal | str | None) -> PaymentSignal | None:
    if signal is None or isinstance(signal, PaymentSignal):
        return signal
    value = signal.strip().lower()
    if value == "cancelled":
        value = PaymentSignal.CANCELED.value
    try:
        return PaymentSignal(value)
    except ValueError:
        logger.warning("Unknown payment signal %r ignored", signal)
        return None
