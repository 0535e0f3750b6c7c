"""
Checkout — the multi-step form that ends in an order.

    from farmstand import checkout

    flow = checkout.CheckoutFlow(cart, service, identity)
    flow.open()
    flow.advance()          # False until email and full name are filled
    await flow.submit()     # only from REVIEW
"""

from farmstand.checkout._types import (
    CheckoutStep,
    FORWARD,
    BACKWARD,
    CurrentUser,
    Identity,
    StaticIdentity,
)
from farmstand.checkout._form import CONTACT_FIELDS, SHIPPING_FIELDS, REQUIRED, CheckoutForm
from farmstand.checkout._flow import CheckoutFlow

__all__ = (
    "CheckoutStep",
    "FORWARD",
    "BACKWARD",
    "CurrentUser",
    "Identity",
    "StaticIdentity",
    "CONTACT_FIELDS",
    "SHIPPING_FIELDS",
    "REQUIRED",
    "CheckoutForm",
    "CheckoutFlow",
)
