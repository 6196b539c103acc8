import typing as t
from collections.abc import Sequence

from cart.schemas import CartLine, CartLineCandidate, CouponDTO


class CartStorageI(t.Protocol):
    """Durable slot holding serialized cart of a single session"""

    async def get(self) -> str | None: ...

    async def set(self, data: str) -> None: ...


class CartStorageFactoryI(t.Protocol):
    def create(self, session_key: str) -> CartStorageI: ...


class CatalogClientI(t.Protocol):
    async def build_candidate(
        self, product_id: str, variation_id: str | None = None, qty: int | None = None
    ) -> CartLineCandidate: ...

    async def validate_coupon(
        self, code: str, lines: Sequence[CartLine]
    ) -> CouponDTO: ...
