"""
Checkout — browse, fill the cart, place an order offline.

With no backend configured the storefront uses the simulated backend:
a short delay and an ``ORD-…`` order id.

    FARMSTAND_SIMULATED_DELAY=0.2 python -m examples.checkout_example
"""

from kungfu import Ok, Error

from farmstand import Settings, Storefront
from farmstand.cart import MemorySlot, SlotStorage
from farmstand.checkout import CurrentUser, StaticIdentity
from examples._infra import banner, fill_checkout, run


async def main() -> None:
    banner("Checkout: simulated order")

    identity = StaticIdentity(CurrentUser(email="alice@example.com", full_name="Alice Farmer"))
    storage = SlotStorage(MemorySlot())

    async with await Storefront.from_settings(Settings(), identity, storage=storage) as shop:
        listing = await shop.catalog.list_products("Poultry")
        print(f"\nPoultry ({'built-in' if listing.from_fallback else 'live'} catalog):")
        for product in listing.products:
            print(f"  {product.emoji} {product.name:<16} {product.price:>6} {product.unit}")

        chicken = listing.products[0]
        shop.cart.add_item(chicken, 2)
        print(f"\nCart: {shop.cart.total_items} item(s), total {shop.cart.total_price}")

        flow = shop.checkout()
        flow.open()
        fill_checkout(flow)
        print(f"Step: {flow.step.value}")

        print("\nPlacing order...")
        match await flow.submit():
            case Ok(receipt):
                print(f"\n✓ Order {receipt.order_id} placed ({receipt.line_count} line(s), {receipt.total_amount})")
                print(f"  Cart empty: {shop.cart.is_empty}")
            case Error(e):
                print(f"\n✗ Failed: {e.message}")
                print(f"  Still on: {flow.step.value}")


if __name__ == "__main__":
    run(main)
