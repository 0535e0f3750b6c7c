"""
Checkout flow — contact → shipping → review → success.
"""

from __future__ import annotations

import uuid

import structlog
from kungfu import Error, Ok, Result

from farmstand.cart import CartStore
from farmstand.checkout._form import CheckoutForm
from farmstand.checkout._types import BACKWARD, FORWARD, CheckoutStep, Identity
from farmstand.orders import (
    OrderReceipt,
    OrderSubmissionService,
    SubmissionError,
    SubmissionErrorKind,
)

logger = structlog.get_logger(__name__)


class CheckoutFlow:
    """
    Step machine for one checkout session.

    advance() and back() follow FORWARD/BACKWARD; the only way into SUCCESS
    is a successful submit() from REVIEW. A successful submission removes the
    submitted lines from the cart. Failures keep the flow on REVIEW with `error` set and the cart
    untouched, and submit() may be called again.

    While a submission is pending, a second submit() is rejected and close()
    is refused.

    Example:
        flow = storefront.checkout()
        flow.open()
        flow.set_field("email", "ada@example.com")
        flow.set_field("full_name", "Ada")
        flow.advance()
        ...
        match await flow.submit():
            case Ok(receipt):
                print(receipt.order_id)
            case Error(err):
                print(err.message)
    """

    def __init__(
        self,
        cart: CartStore,
        service: OrderSubmissionService,
        identity: Identity | None = None,
    ) -> None:
        self._cart = cart
        self._service = service
        self._identity = identity
        self._is_open = False
        self._submitting = False
        self._reset()

    def _reset(self) -> None:
        self._step = CheckoutStep.CONTACT
        self._form = CheckoutForm()
        self._error: SubmissionError | None = None
        self._receipt: OrderReceipt | None = None
        self._submission_key = uuid.uuid4().hex

    # ═══════════════════════════════════════════════════════════════════════════
    # State
    # ═══════════════════════════════════════════════════════════════════════════

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def step(self) -> CheckoutStep:
        return self._step

    @property
    def form(self) -> CheckoutForm:
        return self._form

    @property
    def error(self) -> SubmissionError | None:
        """The last submission failure, cleared when a new submission starts."""
        return self._error

    @property
    def order_id(self) -> str | None:
        return self._receipt.order_id if self._receipt else None

    @property
    def receipt(self) -> OrderReceipt | None:
        return self._receipt

    @property
    def submitting(self) -> bool:
        return self._submitting

    @property
    def submission_key(self) -> str:
        return self._submission_key

    @property
    def missing_fields(self) -> tuple[str, ...]:
        return self._form.missing(self._step)

    # ═══════════════════════════════════════════════════════════════════════════
    # Open / Close
    # ═══════════════════════════════════════════════════════════════════════════

    def open(self) -> None:
        """Start a fresh session at CONTACT, pre-filled from the signed-in user."""
        if self._submitting:
            return
        self._reset()
        user = self._identity.current_user() if self._identity else None
        self._form = CheckoutForm.prefilled(user)
        self._is_open = True

    def close(self) -> bool:
        """Discard the session. Refused (False) while a submission is pending."""
        if self._submitting:
            logger.info("Close refused while submitting", key=self._submission_key)
            return False
        self._reset()
        self._is_open = False
        return True

    # ═══════════════════════════════════════════════════════════════════════════
    # Fields
    # ═══════════════════════════════════════════════════════════════════════════

    def set_field(self, name: str, value: str) -> None:
        if name not in CheckoutForm.field_names():
            raise ValueError(f"Unknown checkout field: {name!r}")
        setattr(self._form, name, value)

    def set_email(self, value: str) -> None:
        self._form.email = value

    def set_full_name(self, value: str) -> None:
        self._form.full_name = value

    def set_phone(self, value: str) -> None:
        self._form.phone = value

    def set_address(self, value: str) -> None:
        self._form.address = value

    def set_city(self, value: str) -> None:
        self._form.city = value

    def set_state(self, value: str) -> None:
        self._form.state = value

    def set_zip_code(self, value: str) -> None:
        self._form.zip_code = value

    def set_notes(self, value: str) -> None:
        self._form.notes = value

    # ═══════════════════════════════════════════════════════════════════════════
    # Transitions
    # ═══════════════════════════════════════════════════════════════════════════

    def advance(self) -> bool:
        """Move forward if the current step's fields are filled in."""
        target = FORWARD.get(self._step)
        if target is None or not self._form.is_complete(self._step):
            return False
        self._step = target
        return True

    def back(self) -> bool:
        target = BACKWARD.get(self._step)
        if target is None or self._submitting:
            return False
        self._step = target
        return True

    async def submit(self) -> Result[OrderReceipt, SubmissionError]:
        if self._submitting:
            return Error(SubmissionError(SubmissionErrorKind.IN_FLIGHT, "Your order is already being placed"))
        if self._step is not CheckoutStep.REVIEW:
            return Error(SubmissionError(
                SubmissionErrorKind.WRONG_STEP,
                f"Cannot place an order from the {self._step.value} step",
            ))

        self._submitting = True
        self._error = None
        submitted = self._cart.items
        try:
            result = await self._service.submit(
                self._form,
                submitted,
                self._cart.total_price,
                key=self._submission_key,
            )
        finally:
            self._submitting = False

        match result:
            case Ok(receipt):
                self._receipt = receipt
                # Only what was ordered; items added while pending stay
                self._cart.remove_lines(submitted)
                self._step = CheckoutStep.SUCCESS
                logger.info("Checkout complete", order_id=receipt.order_id, simulated=receipt.simulated)
            case Error(err):
                self._error = err
                logger.warning("Checkout submission failed", kind=err.kind.name, error=err.message)
        return result


__all__ = ("CheckoutFlow",)
