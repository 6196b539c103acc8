import typing as t
from decimal import Decimal

from pydantic import ConfigDict, Field, computed_field

from core.schemas import BaseDTO, MoneyDecimal, NonEmptyStr

type CartLineKey = tuple[str, str | None]


class CartLine(BaseDTO):
    model_config = ConfigDict(frozen=True)

    product_id: NonEmptyStr
    variation_id: str | None = None
    name: str
    slug: str
    price: MoneyDecimal
    qty: int
    image: str | None = None
    sku: str | None = None

    @property
    def key(self) -> CartLineKey:
        return (self.product_id, self.variation_id)


class CartLineCandidate(BaseDTO):
    """Input contract for adding a line to the cart.
    Omitted or zero qty means a single unit, negative qty is rejected"""

    model_config = ConfigDict(extra="ignore")

    product_id: NonEmptyStr
    variation_id: str | None = None
    name: str
    slug: str
    price: MoneyDecimal
    image: str | None = None
    sku: str | None = None
    qty: int | None = Field(default=None, ge=0)

    @property
    def key(self) -> CartLineKey:
        return (self.product_id, self.variation_id)

    @property
    def effective_qty(self) -> int:
        return self.qty or 1

    def to_line(self) -> CartLine:
        return CartLine(
            **self.model_dump(exclude={"qty"}),
            qty=self.effective_qty,
        )


class AddProductDTO(BaseDTO):
    product_id: NonEmptyStr
    variation_id: str | None = None
    qty: int | None = Field(default=None, ge=0)


class UpdateQtyDTO(BaseDTO):
    product_id: NonEmptyStr
    variation_id: str | None = None
    qty: int


class CartDTO(BaseDTO):
    lines: list[CartLine]
    total: MoneyDecimal
    item_count: int


class CouponDTO(BaseDTO):
    """Coupon accepted by the catalog for the current cart"""

    code: str
    type: t.Literal["percent", "fixed_cart"]
    amount: MoneyDecimal
    description: str | None = None


class CartSummaryLineDTO(CartLine):
    @computed_field  # type: ignore[prop-decorator]
    @property
    def subtotal(self) -> Decimal:
        return self.price * self.qty


class CartSummaryDTO(BaseDTO):
    lines: list[CartSummaryLineDTO]
    subtotal: MoneyDecimal
    discount_total: MoneyDecimal = Decimal(0)
    shipping_total: MoneyDecimal = Decimal(0)
    tax_total: MoneyDecimal = Decimal(0)
    coupon_code: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def grand_total(self) -> Decimal:
        return (
            self.subtotal - self.discount_total + self.shipping_total + self.tax_total
        )


class UpdateQtyResultDTO(BaseDTO):
    action: t.Literal["updated", "deleted"]
