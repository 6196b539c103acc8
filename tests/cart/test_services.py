from decimal import Decimal
import json
from unittest.mock import AsyncMock, create_autospec, patch

import pytest

from cart.domain.interfaces import CartStorageI, CatalogClientI
from cart.domain.services import CartService
from cart.domain.store import CartStore
from cart.repositories import InMemoryCartStorage
from cart.schemas import CouponDTO
from core.logging import StubLogger
from core.services.exceptions import InvalidCouponError
from gateways.db.exceptions import (
    DatabaseError,
    StorageTimeoutError,
    StorageUnavailableError,
)
from tests.utils import new_candidate


@pytest.fixture
def storage() -> InMemoryCartStorage:
    return InMemoryCartStorage(session_key="test")


def _new_service(storage: CartStorageI) -> CartService:
    return CartService(
        StubLogger(), storage, create_autospec(CatalogClientI, instance=True)
    )


@pytest.fixture
def cart_service(storage: InMemoryCartStorage) -> CartService:
    return _new_service(storage)


async def _stored_lines(storage: CartStorageI) -> list[dict]:
    raw = await storage.get()
    assert raw is not None
    return json.loads(raw)


class TestCartService:
    @pytest.mark.asyncio
    async def test_get_empty_cart(self, cart_service: CartService):
        cart = await cart_service.get_cart()
        assert cart.lines == []
        assert cart.total == 0
        assert cart.item_count == 0

    @pytest.mark.asyncio
    async def test_add_persists_after_each_mutation(
        self, cart_service: CartService, storage: InMemoryCartStorage
    ):
        await cart_service.add(new_candidate(product_id="p1", qty=2))
        assert (await _stored_lines(storage))[0]["qty"] == 2
        line = await cart_service.add(new_candidate(product_id="p1", qty=3))
        assert line.qty == 5
        stored = await _stored_lines(storage)
        assert len(stored) == 1 and stored[0]["qty"] == 5

    @pytest.mark.asyncio
    async def test_get_cart_restores_from_storage(self, storage: InMemoryCartStorage):
        store = CartStore()
        store.add_line(new_candidate(product_id="a", price=Decimal(10), qty=2))
        store.add_line(new_candidate(product_id="b", price=Decimal(5), qty=3))
        await storage.set(store.dump())
        service = _new_service(storage)
        cart = await service.get_cart()
        assert list(cart.lines) == list(store.lines)
        assert cart.total == Decimal(35)
        assert cart.item_count == 5

    @pytest.mark.parametrize(
        ["qty", "expected_action"], [(4, "updated"), (0, "deleted"), (-1, "deleted")]
    )
    @pytest.mark.asyncio
    async def test_update_qty(
        self, cart_service: CartService, qty: int, expected_action: str
    ):
        await cart_service.add(new_candidate(product_id="p1"))
        action = await cart_service.update_qty("p1", None, qty)
        assert action == expected_action
        cart = await cart_service.get_cart()
        if expected_action == "deleted":
            assert cart.lines == []
        else:
            assert cart.lines[0].qty == qty

    @pytest.mark.asyncio
    async def test_remove_is_idempotent(self, cart_service: CartService):
        await cart_service.add(new_candidate(product_id="p1"))
        await cart_service.remove("p1")
        await cart_service.remove("p1")
        assert (await cart_service.get_cart()).lines == []

    @pytest.mark.asyncio
    async def test_clear(
        self, cart_service: CartService, storage: InMemoryCartStorage
    ):
        await cart_service.add(new_candidate())
        await cart_service.add(new_candidate())
        await cart_service.clear()
        assert await _stored_lines(storage) == []
        cart = await cart_service.get_cart()
        assert cart.item_count == 0 and cart.total == 0

    @pytest.mark.asyncio
    async def test_summary(self, cart_service: CartService):
        await cart_service.add(new_candidate(product_id="a", price=Decimal(10), qty=2))
        await cart_service.add(new_candidate(product_id="b", price=Decimal(5), qty=3))
        summary = await cart_service.summary()
        assert [line.subtotal for line in summary.lines] == [Decimal(20), Decimal(15)]
        assert summary.subtotal == Decimal(35)
        assert summary.discount_total == 0
        assert summary.shipping_total == summary.tax_total == 0
        assert summary.grand_total == Decimal(35)

    @pytest.mark.parametrize(
        ["coupon_type", "amount", "expected_discount"],
        [
            ("percent", Decimal(10), Decimal("3.5")),
            ("fixed_cart", Decimal(5), Decimal(5)),
            ("fixed_cart", Decimal(100), Decimal(35)),
        ],
    )
    @pytest.mark.asyncio
    async def test_summary_with_coupon(
        self,
        cart_service: CartService,
        coupon_type: str,
        amount: Decimal,
        expected_discount: Decimal,
    ):
        await cart_service.add(new_candidate(product_id="a", price=Decimal(10), qty=2))
        await cart_service.add(new_candidate(product_id="b", price=Decimal(5), qty=3))
        catalog_client = cart_service._catalog_client
        catalog_client.validate_coupon = AsyncMock(
            return_value=CouponDTO(code="SAVE", type=coupon_type, amount=amount)
        )
        summary = await cart_service.summary("save")
        catalog_client.validate_coupon.assert_awaited_once()
        code, lines = catalog_client.validate_coupon.await_args.args
        assert code == "save"
        assert [line.product_id for line in lines] == ["a", "b"]
        assert summary.coupon_code == "SAVE"
        assert summary.subtotal == Decimal(35)
        assert summary.discount_total == expected_discount
        assert summary.grand_total == Decimal(35) - expected_discount

    @pytest.mark.asyncio
    async def test_summary_with_invalid_coupon(self, cart_service: CartService):
        await cart_service.add(new_candidate(product_id="a"))
        catalog_client = cart_service._catalog_client
        catalog_client.validate_coupon = AsyncMock(
            side_effect=InvalidCouponError("Coupon has expired")
        )
        with pytest.raises(InvalidCouponError, match="Coupon has expired"):
            await cart_service.summary("OLD")

    @pytest.mark.asyncio
    async def test_summary_without_coupon_skips_catalog(
        self, cart_service: CartService
    ):
        catalog_client = cart_service._catalog_client
        catalog_client.validate_coupon = AsyncMock()
        summary = await cart_service.summary()
        catalog_client.validate_coupon.assert_not_awaited()
        assert summary.coupon_code is None
        assert summary.discount_total == 0

    @pytest.mark.asyncio
    async def test_add_product_uses_catalog(self, cart_service: CartService):
        candidate = new_candidate(product_id="p1", variation_id="v1", qty=2)
        catalog_client = cart_service._catalog_client
        catalog_client.build_candidate = AsyncMock(return_value=candidate)
        line = await cart_service.add_product("p1", "v1", 2)
        catalog_client.build_candidate.assert_awaited_once_with("p1", "v1", 2)
        assert line.key == ("p1", "v1")
        assert line.qty == 2


class TestCartServiceStorageFailures:
    @pytest.mark.asyncio
    async def test_failed_persist_does_not_propagate(self):
        storage = create_autospec(CartStorageI, instance=True)
        storage.get = AsyncMock(return_value=None)
        storage.set = AsyncMock(side_effect=StorageUnavailableError("down"))
        service = _new_service(storage)
        line = await service.add(new_candidate(product_id="p1", qty=2))
        assert line.qty == 2
        storage.set.assert_awaited_once()
        await service.clear()

    @pytest.mark.asyncio
    async def test_failed_read_gives_empty_cart(self):
        storage = create_autospec(CartStorageI, instance=True)
        storage.get = AsyncMock(side_effect=DatabaseError("boom"))
        storage.set = AsyncMock()
        service = _new_service(storage)
        assert (await service.get_cart()).lines == []
        line = await service.add(new_candidate(product_id="p1"))
        assert line.qty == 1
        storage.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_read_keeps_stored_cart(self, storage: InMemoryCartStorage):
        store = CartStore()
        for product_id in ["a", "b", "c"]:
            store.add_line(new_candidate(product_id=product_id))
        await storage.set(store.dump())
        service = _new_service(storage)
        with patch.object(
            storage, "get", AsyncMock(side_effect=StorageTimeoutError("timeout"))
        ):
            line = await service.add(new_candidate(product_id="z", qty=2))
            assert line.qty == 2
            assert await service.update_qty("a", None, 0) == "deleted"
            await service.remove("b")
        stored = await _stored_lines(storage)
        assert [line["product_id"] for line in stored] == ["a", "b", "c"]
        cart = await service.get_cart()
        assert [line.product_id for line in cart.lines] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_malformed_data_gives_empty_cart(self):
        storage = InMemoryCartStorage(session_key="test")
        await storage.set("{broken")
        service = _new_service(storage)
        assert (await service.get_cart()).lines == []
        await service.add(new_candidate(product_id="p1"))
        assert len(await _stored_lines(storage)) == 1
