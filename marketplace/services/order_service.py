# marketplace/services/order_service.py
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.exc import DataError, SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.domain.errors import (
    CartNotFound,
    EmptyCart,
    InvalidStatusTransition,
    ItemsUnavailable,
    OrderNotFound,
    OrderNotProcessable,
    TransientFailure,
)
from marketplace.domain.order_status import OrderStatus, can_transition
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.services.catalog_service import clamp_page
from marketplace.services.notification_service import NotificationService
from marketplace.utils.settings import CHECKOUT_MODE, ORDER_STATUS_POLICY, DEFAULT_PAGE_SIZE
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

CHECKOUT_OPTIMISTIC = "optimistic"
CHECKOUT_STRICT = "strict"

STATUS_PERMISSIVE = "permissive"
STATUS_STRICT = "strict"


class OrderService:
    """
    Orders: checkout (cart -> order), buyer reads, seller status updates.

    checkout_mode:
      optimistic - availability is checked before the transaction; a product
                   withdrawn between that read and the commit still gets sold
      strict     - inside the transaction every product is flipped to
                   unavailable with a conditional UPDATE and the checkout
                   aborts if any of them was taken meanwhile
    status_policy:
      permissive - sellers may set any status
      strict     - only transitions from ALLOWED_TRANSITIONS
    """

    def __init__(
        self,
        db: Session,
        notification_service: NotificationService | None = None,
        checkout_mode: str = CHECKOUT_MODE,
        status_policy: str = ORDER_STATUS_POLICY,
    ):
        if checkout_mode not in (CHECKOUT_OPTIMISTIC, CHECKOUT_STRICT):
            raise ValueError(f"Unknown checkout mode: {checkout_mode}")
        if status_policy not in (STATUS_PERMISSIVE, STATUS_STRICT):
            raise ValueError(f"Unknown order status policy: {status_policy}")

        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.notification_service = notification_service or NotificationService()
        self.checkout_mode = checkout_mode
        self.status_policy = status_policy

    #commands
    def create_order(self, user_id: int) -> Dict[str, Any]:
        """
        Turn the user's cart into an order.

        Validation reads happen first (cart, fresh product rows, availability,
        total). The writes - order row, order items with the frozen price,
        optional reservation, clearing the cart - share one transaction and
        are either all committed or all rolled back. On rollback the cart is
        left as it was so the user can retry.
        """
        cart = self.carts.get_cart_by_user(user_id)
        if not cart:
            raise CartNotFound()

        lines = self.carts.get_cart_lines(cart.id)
        if not lines:
            raise EmptyCart()

        unavailable = [product.id for _, product in lines if not product.is_available]
        if unavailable:
            logger.info(f"Checkout for user {user_id} rejected, unavailable products: {unavailable}")
            raise ItemsUnavailable(unavailable)

        # price read above becomes price_at_purchase
        total = sum((product.price * item.quantity for item, product in lines), Decimal("0.00"))

        try:
            order = self.repo.add_order(
                OrderModel(
                    user_id=user_id,
                    status=OrderStatus.PENDING.value,
                    total_amount=total,
                )
            )
            self.repo.add_order_items(
                [
                    OrderItemModel(
                        order_id=order.id,
                        product_id=product.id,
                        quantity=item.quantity,
                        price_at_purchase=product.price,
                    )
                    for item, product in lines
                ]
            )

            if self.checkout_mode == CHECKOUT_STRICT:
                taken = [product.id for _, product in lines if not self.products.mark_sold(product.id)]
                if taken:
                    raise ItemsUnavailable(taken)

            self.carts.delete_cart_items(cart.id)
            self.repo.commit()

        except ItemsUnavailable as e:
            self.repo.rollback()
            logger.info(f"Checkout for user {user_id} lost the race for products {e.product_ids}")
            raise
        except DataError as e:
            #deterministic, e.g. total overflows Numeric(10,2); retrying will not help
            self.repo.rollback()
            logger.warning(f"Checkout for user {user_id} rejected by the store: {e}")
            raise OrderNotProcessable() from e
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Checkout for user {user_id} rolled back: {e}")
            raise TransientFailure("Could not place the order, please try again") from e

        logger.info(f"Order {order.id} created from cart {cart.id}, total {total}")

        result = self.get_order(user_id, order.id)
        self.notification_service.send_order_placed(user_id, order.id, total)
        return result

    def update_order_status(self, acting_user_id: int, order_id: int, new_status: OrderStatus | str) -> Dict[str, Any]:
        """
        Sellers move orders through their lifecycle. Any seller with at least
        one line in the order may do it, for the whole order.
        """
        new_status = OrderStatus(new_status)

        order = self.repo.get_order_for_seller(order_id, acting_user_id)
        if not order:
            raise OrderNotFound()

        current = OrderStatus(order.status)
        if self.status_policy == STATUS_STRICT and not can_transition(current, new_status):
            raise InvalidStatusTransition(
                f"Cannot change order status from {current.value} to {new_status.value}"
            )

        self.repo.set_status(order.id, new_status.value)
        self.repo.commit()
        self.repo.refresh(order)

        logger.info(
            f"Seller {acting_user_id} changed order {order_id} status {current.value} -> {new_status.value}"
        )

        self.notification_service.send_status_changed(order.user_id, order.id, new_status.value)
        return self._order_to_dict(order)

    #query
    def get_order(self, user_id: int, order_id: int) -> Dict[str, Any]:
        order = self.repo.get_user_order(order_id, user_id)
        if not order:
            raise OrderNotFound()
        return self._order_to_dict(order)

    def list_orders(self, user_id: int, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
        page, limit, offset = clamp_page(page, limit)
        rows = self.repo.list_user_orders(user_id, limit, offset)

        return {
            "orders": [
                {
                    "id": order.id,
                    "user_id": order.user_id,
                    "status": order.status,
                    "total_amount": order.total_amount,
                    "created_at": order.created_at,
                    "updated_at": order.updated_at,
                    "item_count": item_count,
                }
                for order, item_count in rows
            ],
            "pagination": {
                "page": page,
                "limit": limit,
                "count": len(rows),
            },
        }

    def _order_to_dict(self, order: OrderModel) -> Dict[str, Any]:
        lines = self.repo.get_order_lines(order.id)
        return {
            "id": order.id,
            "user_id": order.user_id,
            "status": order.status,
            "total_amount": order.total_amount,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
            "items": [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "price_at_purchase": item.price_at_purchase,
                    "title": title,
                    "seller_name": seller_name,
                }
                for item, title, seller_name in lines
            ],
        }
