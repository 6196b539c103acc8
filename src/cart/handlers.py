from fastapi import APIRouter, Depends, Query, status
import typing as t
from cart.domain.interfaces import CartStorageFactoryI, CatalogClientI
from cart.domain.services import CartService
from cart.schemas import (
    AddProductDTO,
    CartDTO,
    CartLine,
    CartLineCandidate,
    CartSummaryDTO,
    UpdateQtyDTO,
    UpdateQtyResultDTO,
)
from core.dependencies import SessionKeyDep
from core.ioc import Inject, Resolve

router = APIRouter(prefix="/cart", tags=["cart"])


def cart_service_factory(
    session_key: SessionKeyDep,
    storage_factory: t.Annotated[CartStorageFactoryI, Inject(CartStorageFactoryI)],
    catalog_client: t.Annotated[CatalogClientI, Inject(CatalogClientI)],
) -> CartService:
    return Resolve(
        CartService,
        storage=storage_factory.create(session_key),
        catalog_client=catalog_client,
    )


CartServiceDep = t.Annotated[CartService, Depends(cart_service_factory)]


@router.get("/")
async def get_cart(cart_service: CartServiceDep) -> CartDTO:
    return await cart_service.get_cart()


@router.post("/add")
async def add_to_cart(
    candidate: CartLineCandidate, cart_service: CartServiceDep
) -> CartLine:
    return await cart_service.add(candidate)


@router.post("/add-product")
async def add_product_to_cart(
    dto: AddProductDTO, cart_service: CartServiceDep
) -> CartLine:
    return await cart_service.add_product(dto.product_id, dto.variation_id, dto.qty)


@router.patch("/update")
async def update_line_qty(
    dto: UpdateQtyDTO, cart_service: CartServiceDep
) -> UpdateQtyResultDTO:
    action = await cart_service.update_qty(dto.product_id, dto.variation_id, dto.qty)
    return UpdateQtyResultDTO(action=action)


@router.delete("/remove", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_cart(
    cart_service: CartServiceDep,
    product_id: t.Annotated[str, Query(min_length=1)],
    variation_id: str | None = None,
) -> None:
    await cart_service.remove(product_id, variation_id)


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cart(cart_service: CartServiceDep) -> None:
    await cart_service.clear()


@router.get("/summary")
async def get_cart_summary(
    cart_service: CartServiceDep,
    coupon_code: t.Annotated[str | None, Query(min_length=1)] = None,
) -> CartSummaryDTO:
    return await cart_service.summary(coupon_code)
