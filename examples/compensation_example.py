"""
Compensation — a line write fails, the order row is deleted.

Level 4: farmstand.orders (compensating write chain)
Level 3: combinators.lift
Level 2: kungfu.Result
"""

from decimal import Decimal

from kungfu import Ok, Error

from farmstand import orders as O
from farmstand.cart import CartLine
from farmstand.catalog import STATIC_PRODUCTS
from farmstand.checkout import CheckoutForm
from examples._infra import banner, run


FORM = CheckoutForm(
    email="bob@example.com",
    full_name="Bob Grower",
    address="3 Orchard Road",
    city="Salem",
    state="OR",
    zip_code="97301",
)


async def attempt(title: str, backend: O.MemoryBackend) -> None:
    banner(title)
    service = O.OrderSubmissionService(backend)
    lines = [CartLine(STATIC_PRODUCTS[0], 2), CartLine(STATIC_PRODUCTS[2], 1)]

    match await service.submit(FORM, lines, Decimal("32.97")):
        case Ok(receipt):
            print(f"\n✓ Order {receipt.order_id}")
        case Error(e):
            print(f"\n✗ Failed: {e.message}")
            if e.orphaned_order_id:
                print(f"  Orphaned order: {e.orphaned_order_id}")

    print(f"  Backend calls: {' → '.join(backend.calls)}")
    print(f"  Orders stored: {len(backend.orders)}")


async def main() -> None:
    await attempt("Lines fail, order rolled back", O.MemoryBackend(fail_on={"create_order_lines"}))
    await attempt("Lines fail, rollback fails", O.MemoryBackend(fail_on={"create_order_lines", "delete_order"}))


if __name__ == "__main__":
    run(main)
