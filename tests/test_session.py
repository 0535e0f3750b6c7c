"""Settings and the Storefront composition root."""

import httpx
import pytest

from farmstand import Settings, Storefront
from farmstand.cart import MemorySlot, SlotStorage
from farmstand.checkout import CheckoutStep, CurrentUser, StaticIdentity
from farmstand.orders import RestOrderBackend, SimulatedBackend, SQLAlchemyBackend

from tests._helpers import ok_value


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ("BACKEND_URL", "BACKEND_KEY", "DATABASE_URL", "CART_DIR", "CART_SLOT", "SIMULATED_DELAY"):
        monkeypatch.delenv(f"FARMSTAND_{name}", raising=False)
    monkeypatch.chdir(tmp_path)


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.cart_slot == "farm-poultry-cart"
        assert settings.simulated_delay == 1.5
        assert settings.request_timeout == 10.0
        assert settings.backend_configured is False

    def test_reads_prefixed_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FARMSTAND_BACKEND_URL", "https://shop.example.com")
        monkeypatch.setenv("FARMSTAND_BACKEND_KEY", "anon-key")
        monkeypatch.setenv("FARMSTAND_CART_DIR", str(tmp_path))

        settings = Settings()

        assert settings.backend_configured is True
        assert settings.cart_path == tmp_path / "farm-poultry-cart.json"

    def test_url_without_key_is_not_configured(self, monkeypatch):
        monkeypatch.setenv("FARMSTAND_BACKEND_URL", "https://shop.example.com")
        assert Settings().backend_configured is False

    def test_reads_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("FARMSTAND_CART_SLOT=test-cart\n", encoding="utf-8")
        assert Settings().cart_slot == "test-cart"


class TestStorefront:
    async def test_unconfigured_backend_is_simulated(self, tmp_path, chicken):
        settings = Settings(cart_dir=tmp_path, simulated_delay=0)

        async with await Storefront.from_settings(settings) as shop:
            assert isinstance(shop.orders.backend, SimulatedBackend)

            listing = await shop.catalog.list_products()
            assert listing.from_fallback is True

            shop.cart.add_item(chicken, 2)
            flow = shop.checkout()
            flow.open()
            flow.set_email("ada@example.com")
            flow.set_full_name("Ada")
            flow.advance()
            flow.set_address("12 Barn Lane")
            flow.set_city("Springfield")
            flow.set_state("IL")
            flow.set_zip_code("62701")
            flow.advance()

            receipt = ok_value(await flow.submit())

        assert receipt.order_id.startswith("ORD-")
        assert flow.step is CheckoutStep.SUCCESS

    async def test_cart_survives_new_session(self, tmp_path, chicken):
        settings = Settings(cart_dir=tmp_path, simulated_delay=0)

        async with await Storefront.from_settings(settings) as first:
            first.cart.add_item(chicken, 3)

        async with await Storefront.from_settings(settings) as second:
            assert second.cart.total_items == 3
            assert second.cart.is_open is False

    async def test_configured_backend_uses_rest(self, tmp_path):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[])

        settings = Settings(
            backend_url="https://shop.example.com",
            backend_key="anon-key",
            cart_dir=tmp_path,
        )

        async with await Storefront.from_settings(settings, transport=httpx.MockTransport(handler)) as shop:
            assert isinstance(shop.orders.backend, RestOrderBackend)
            listing = await shop.catalog.list_products()

        assert listing.from_fallback is False
        assert listing.products == []

    async def test_database_url_uses_sqlalchemy(self, tmp_path):
        settings = Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'shop.db'}", cart_dir=tmp_path)

        async with await Storefront.from_settings(settings) as shop:
            assert isinstance(shop.orders.backend, SQLAlchemyBackend)

    async def test_identity_reaches_checkout(self, tmp_path):
        identity = StaticIdentity(CurrentUser(email="grace@example.com", full_name="Grace"))
        storage = SlotStorage(MemorySlot())

        async with await Storefront.from_settings(Settings(cart_dir=tmp_path), identity, storage=storage) as shop:
            flow = shop.checkout()
            flow.open()

        assert flow.form.email == "grace@example.com"
