"""
Checkout form — the fields collected across the contact and shipping steps.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

from farmstand.checkout._types import CheckoutStep, CurrentUser

CONTACT_FIELDS = ("email", "full_name")
SHIPPING_FIELDS = ("address", "city", "state", "zip_code")

REQUIRED: dict[CheckoutStep, tuple[str, ...]] = {
    CheckoutStep.CONTACT: CONTACT_FIELDS,
    CheckoutStep.SHIPPING: SHIPPING_FIELDS,
}


@dataclass(slots=True)
class CheckoutForm:
    """Mutable for the length of one checkout session. Phone and notes are optional."""

    email: str = ""
    full_name: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    notes: str = ""

    @classmethod
    def prefilled(cls, user: CurrentUser | None) -> CheckoutForm:
        if user is None:
            return cls()
        return cls(email=user.email or "", full_name=user.full_name or "")

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def missing(self, step: CheckoutStep) -> tuple[str, ...]:
        """Required fields of `step` that are empty or whitespace."""
        return tuple(name for name in REQUIRED.get(step, ()) if not getattr(self, name).strip())

    def is_complete(self, step: CheckoutStep) -> bool:
        return not self.missing(step)


__all__ = ("CONTACT_FIELDS", "SHIPPING_FIELDS", "REQUIRED", "CheckoutForm")
