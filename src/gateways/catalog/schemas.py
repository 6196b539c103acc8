from decimal import Decimal

from pydantic import AliasChoices, Field

from core.schemas import BaseDTO, MoneyDecimal


class _PricedRecord(BaseDTO):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    regular_price: MoneyDecimal = Field(alias="regularPrice")
    sale_price: MoneyDecimal | None = Field(default=None, alias="salePrice")
    sku: str | None = None

    @property
    def actual_price(self) -> Decimal:
        return self.sale_price if self.sale_price is not None else self.regular_price


class ProductRecordDTO(_PricedRecord):
    title: str
    slug: str
    featured_image: str | None = Field(default=None, alias="featuredImage")


class VariationRecordDTO(_PricedRecord):
    product_id: str = Field(alias="productId")
    image: str | None = None
    attribute_selections: dict[str, str] = Field(
        default_factory=dict, alias="attributeSelections"
    )
