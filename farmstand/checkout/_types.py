"""
Checkout types — steps, the transition table, and the identity collaborator.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class CheckoutStep(Enum):
    """
    Steps of one checkout session.

    Lifecycle:
        CONTACT → SHIPPING → REVIEW → SUCCESS
        back: SHIPPING → CONTACT, REVIEW → SHIPPING
    SUCCESS is terminal; reopening the checkout starts again at CONTACT.
    """

    CONTACT = "contact"
    SHIPPING = "shipping"
    REVIEW = "review"
    SUCCESS = "success"


FORWARD: dict[CheckoutStep, CheckoutStep] = {
    CheckoutStep.CONTACT: CheckoutStep.SHIPPING,
    CheckoutStep.SHIPPING: CheckoutStep.REVIEW,
}
"""Steps advance() may leave, and where to. REVIEW → SUCCESS only via submit()."""

BACKWARD: dict[CheckoutStep, CheckoutStep] = {
    CheckoutStep.SHIPPING: CheckoutStep.CONTACT,
    CheckoutStep.REVIEW: CheckoutStep.SHIPPING,
}


@dataclass(frozen=True, slots=True)
class CurrentUser:
    email: str
    full_name: str | None = None


class Identity(Protocol):
    """The signed-in user, if any. Used only to pre-fill the contact step."""

    def current_user(self) -> CurrentUser | None:
        ...


@dataclass(frozen=True, slots=True)
class StaticIdentity:
    """Identity that always reports the same user (or nobody)."""

    user: CurrentUser | None = None

    def current_user(self) -> CurrentUser | None:
        return self.user


__all__ = (
    "CheckoutStep",
    "FORWARD",
    "BACKWARD",
    "CurrentUser",
    "Identity",
    "StaticIdentity",
)
