from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

from httpx import AsyncClient, Response, codes
from pydantic import TypeAdapter, ValidationError

from cart.schemas import CartLine, CartLineCandidate, CouponDTO
from core.logging import AbstractLogger
from core.services.exceptions import (
    EntityNotFoundError,
    ExternalGatewayError,
    InvalidCouponError,
)
from core.utils import log_request, log_response
from gateways.catalog.schemas import ProductRecordDTO, VariationRecordDTO


def _path_segment(value: str) -> str:
    # ids come from clients, so they must not be able to alter the upstream path
    return quote(value, safe="")


class CatalogClient:
    """Client for upstream catalog API.
    Responses are wrapped as {"success": bool, "data": ...}"""

    def __init__(self, client: AsyncClient, logger: AbstractLogger, base_url: str):
        self._client = client
        self._logger = logger
        self._base_url = base_url.rstrip("/")

    def _get_logging_prefix(self, func_name: str) -> str:
        return self.__class__.__name__ + "." + func_name

    def _unwrap(self, resp: Response) -> Any:
        log_response(resp, self._logger)
        resp.raise_for_status()
        try:
            body = resp.json()
            if not body.get("success", True):
                raise ValueError("Unsuccessful response: %s" % body.get("error"))
            return body["data"]
        except (KeyError, ValueError, AttributeError) as e:
            self._logger.error(
                "Malformed catalog response", url=resp.request.url, error=e
            )
            raise ExternalGatewayError() from e

    def _parse[T](self, tp: type[T], data: Any) -> T:
        try:
            return TypeAdapter(tp).validate_python(data)
        except ValidationError as e:
            self._logger.error(
                "Unexpected catalog record shape",
                record_type=tp,
                errors_count=e.error_count(),
            )
            raise ExternalGatewayError() from e

    def _get_error_message(self, resp: Response) -> str | None:
        try:
            return resp.json().get("error")
        except (ValueError, AttributeError):
            return None

    async def get_product(self, product_id: str) -> ProductRecordDTO:
        with log_request(self._get_logging_prefix("get_product"), self._logger):
            resp = await self._client.get(
                f"{self._base_url}/products/{_path_segment(product_id)}"
            )
            if resp.status_code == codes.NOT_FOUND:
                raise EntityNotFoundError("Product", id=product_id)
            data = self._unwrap(resp)
        return self._parse(ProductRecordDTO, data)

    async def get_variation(
        self, product_id: str, variation_id: str
    ) -> VariationRecordDTO:
        with log_request(self._get_logging_prefix("get_variation"), self._logger):
            resp = await self._client.get(
                f"{self._base_url}/products/{_path_segment(product_id)}/variations"
            )
            if resp.status_code == codes.NOT_FOUND:
                raise EntityNotFoundError("Product", id=product_id)
            data = self._unwrap(resp)
        for variation in self._parse(list[VariationRecordDTO], data):
            if variation.id == variation_id:
                return variation
        raise EntityNotFoundError("Variation", id=variation_id, product_id=product_id)

    async def build_candidate(
        self, product_id: str, variation_id: str | None = None, qty: int | None = None
    ) -> CartLineCandidate:
        product = await self.get_product(product_id)
        if variation_id is None:
            return CartLineCandidate(
                product_id=product.id,
                name=product.title,
                slug=product.slug,
                price=product.actual_price,
                image=product.featured_image,
                sku=product.sku,
                qty=qty,
            )
        variation = await self.get_variation(product_id, variation_id)
        name = product.title
        if variation.attribute_selections:
            name += " - " + ", ".join(variation.attribute_selections.values())
        return CartLineCandidate(
            product_id=product.id,
            variation_id=variation.id,
            name=name,
            slug=product.slug,
            price=variation.actual_price,
            image=variation.image or product.featured_image,
            sku=variation.sku,
            qty=qty,
        )

    async def validate_coupon(self, code: str, lines: Sequence[CartLine]) -> CouponDTO:
        """Upstream checks expiry, usage limits and min/max spend of the cart"""
        payload = {
            "code": code,
            "items": [
                {
                    "productId": line.product_id,
                    "variationId": line.variation_id,
                    "qty": line.qty,
                }
                for line in lines
            ],
        }
        with log_request(self._get_logging_prefix("validate_coupon"), self._logger):
            resp = await self._client.post(
                f"{self._base_url}/coupons/validate", json=payload
            )
            if resp.status_code == codes.BAD_REQUEST:
                raise InvalidCouponError(self._get_error_message(resp))
            data = self._unwrap(resp)
        return self._parse(CouponDTO, data)
