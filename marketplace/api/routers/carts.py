#marketplace/api/routers/carts.py
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from marketplace.api.errors import to_http
from marketplace.data.database import get_db
from marketplace.domain.errors import MarketplaceError
from marketplace.domain.schemas import (
    CartClearedOut,
    CartItemUpdatedOut,
    CartOut,
    ItemIn,
    ItemUpdate,
)
from marketplace.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("/", response_model=CartOut)
def get_cart(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    try:
        return get_service(db).get_cart(user_id)
    except MarketplaceError as e:
        raise to_http(e)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    try:
        return get_service(db).add_item(
            user_id=user_id,
            product_id=payload.product_id,
            quantity=payload.quantity,
        )
    except MarketplaceError as e:
        raise to_http(e)


@router.put("/items/{item_id}", response_model=CartItemUpdatedOut)
def update_item(
    item_id: int,
    payload: ItemUpdate,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    try:
        return get_service(db).update_item(user_id, item_id, payload.quantity)
    except MarketplaceError as e:
        raise to_http(e)


@router.delete("/items/{item_id}", status_code=204)
def remove_item(
    item_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    try:
        get_service(db).remove_item(user_id, item_id)
    except MarketplaceError as e:
        raise to_http(e)
    return Response(status_code=204)


@router.delete("/", response_model=CartClearedOut)
def clear_cart(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    try:
        return get_service(db).clear_cart(user_id)
    except MarketplaceError as e:
        raise to_http(e)
