from decimal import Decimal
from typing import Literal

from cart.domain.interfaces import CartStorageI, CatalogClientI
from cart.domain.store import CartStore
from cart.schemas import (
    CartDTO,
    CartLine,
    CartLineCandidate,
    CartSummaryDTO,
    CartSummaryLineDTO,
    CouponDTO,
)
from core.logging import AbstractLogger
from core.services.base import BaseService
from gateways.db.exceptions import DatabaseError


class CartService(BaseService):
    """Applies cart operations to the store of a single session.
    Each mutation restores the store from storage, applies the change and persists it.
    Storage failures are logged and never reach the caller."""

    entity_name = "Cart"

    def __init__(
        self,
        logger: AbstractLogger,
        storage: CartStorageI,
        catalog_client: CatalogClientI,
    ):
        super().__init__(logger)
        self._storage = storage
        self._catalog_client = catalog_client

    async def _restore(self) -> tuple[CartStore, bool]:
        """Returns restored store and whether storage was actually read.
        Store built after a failed read must not be persisted,
        otherwise it overwrites the cart kept in storage"""
        try:
            raw = await self._storage.get()
        except DatabaseError as e:
            self._logger.warning(
                "Failed to read cart from storage, starting with empty cart",
                error=e,
            )
            return CartStore(), False
        return CartStore.restore(raw, self._logger), True

    async def _persist(self, store: CartStore) -> None:
        try:
            await self._storage.set(store.dump())
        except DatabaseError as e:
            self._logger.exception(
                "Failed to persist cart, in-memory state is kept", error=e
            )

    def _to_dto(self, store: CartStore) -> CartDTO:
        return CartDTO(
            lines=list(store.lines), total=store.total, item_count=store.item_count
        )

    async def get_cart(self) -> CartDTO:
        store, _ = await self._restore()
        return self._to_dto(store)

    async def add(self, candidate: CartLineCandidate) -> CartLine:
        store, restored = await self._restore()
        line = store.add_line(candidate)
        self._logger.debug(
            "Line added to cart",
            product_id=line.product_id,
            variation_id=line.variation_id,
            qty=line.qty,
        )
        if restored:
            await self._persist(store)
        return line

    async def add_product(
        self, product_id: str, variation_id: str | None = None, qty: int | None = None
    ) -> CartLine:
        candidate = await self._catalog_client.build_candidate(
            product_id, variation_id, qty
        )
        return await self.add(candidate)

    async def update_qty(
        self, product_id: str, variation_id: str | None, qty: int
    ) -> Literal["updated", "deleted"]:
        store, restored = await self._restore()
        store.update_quantity(product_id, variation_id, qty)
        if restored:
            await self._persist(store)
        return "deleted" if qty <= 0 else "updated"

    async def remove(self, product_id: str, variation_id: str | None = None) -> None:
        store, restored = await self._restore()
        if store.remove_line(product_id, variation_id) and restored:
            await self._persist(store)

    async def clear(self) -> None:
        # result doesn't depend on the previous content, so no restore needed
        await self._persist(CartStore())

    @staticmethod
    def _calc_discount(coupon: CouponDTO, subtotal: Decimal) -> Decimal:
        if coupon.type == "percent":
            discount = subtotal * coupon.amount / 100
        else:
            discount = coupon.amount
        return min(discount, subtotal)

    async def summary(self, coupon_code: str | None = None) -> CartSummaryDTO:
        store, _ = await self._restore()
        subtotal = store.total
        discount_total = Decimal(0)
        applied_code = None
        if coupon_code:
            coupon = await self._catalog_client.validate_coupon(
                coupon_code, store.lines
            )
            discount_total = self._calc_discount(coupon, subtotal)
            applied_code = coupon.code
            self._logger.debug(
                "Coupon applied", code=applied_code, discount=discount_total
            )
        return CartSummaryDTO(
            lines=[
                CartSummaryLineDTO.model_validate(line.model_dump())
                for line in store.lines
            ],
            subtotal=subtotal,
            discount_total=discount_total,
            coupon_code=applied_code,
        )
