# marketplace/api/routers/orders.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.errors import to_http
from marketplace.data.database import get_db
from marketplace.domain.errors import MarketplaceError
from marketplace.domain.schemas import OrderListOut, OrderOut, OrderStatusIn
from marketplace.services.order_service import OrderService
from marketplace.utils.settings import DEFAULT_PAGE_SIZE

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("/", response_model=OrderOut, status_code=201)
def create_order(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """
    Places an order from the caller's cart and empties the cart.
    The notification is sent asynchronously.
    """
    try:
        return get_service(db).create_order(user_id)
    except MarketplaceError as e:
        raise to_http(e)


@router.get("/", response_model=OrderListOut)
def list_orders(
    user_id: int = Query(...),
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    return get_service(db).list_orders(user_id, page, limit)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    try:
        return get_service(db).get_order(user_id, order_id)
    except MarketplaceError as e:
        raise to_http(e)


@router.put("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """
    Seller-side status change, allowed for any seller of an item in the order.
    """
    try:
        return get_service(db).update_order_status(user_id, order_id, payload.status)
    except MarketplaceError as e:
        raise to_http(e)
