import pytest

from farmstand.cart import CartStore, MemorySlot, SlotStorage
from farmstand.catalog import STATIC_PRODUCTS, Product
from farmstand.checkout import CheckoutForm
from farmstand.orders import MemoryBackend, OrderSubmissionService


def _product(product_id: str) -> Product:
    return next(p for p in STATIC_PRODUCTS if p.id == product_id)


@pytest.fixture
def chicken() -> Product:
    """Whole Chicken, 12.99 per kg."""
    return _product("1")


@pytest.fixture
def breast() -> Product:
    return _product("2")


@pytest.fixture
def eggs() -> Product:
    """Farm Fresh Eggs, 6.99 a dozen."""
    return _product("3")


@pytest.fixture
def slot() -> MemorySlot:
    return MemorySlot()


@pytest.fixture
def cart(slot) -> CartStore:
    return CartStore(SlotStorage(slot))


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def service(backend) -> OrderSubmissionService:
    return OrderSubmissionService(backend)


@pytest.fixture
def form() -> CheckoutForm:
    return CheckoutForm(
        email="ada@example.com",
        full_name="Ada Lovelace",
        phone="555-0100",
        address="12 Barn Lane",
        city="Springfield",
        state="IL",
        zip_code="62701",
        notes="Leave by the gate",
    )
