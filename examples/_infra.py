"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine

from farmstand import logging as log
from farmstand.config import Settings
from farmstand.checkout import CheckoutFlow


def fill_checkout(flow: CheckoutFlow) -> None:
    """Walk a flow from CONTACT to REVIEW with a sample customer."""
    flow.set_email("alice@example.com")
    flow.set_full_name("Alice Farmer")
    flow.advance()
    flow.set_address("12 Barn Lane")
    flow.set_city("Springfield")
    flow.set_state("IL")
    flow.set_zip_code("62701")
    flow.set_notes("Leave by the gate")
    flow.advance()


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    log.configure(Settings().log_level)
    asyncio.run(main())
