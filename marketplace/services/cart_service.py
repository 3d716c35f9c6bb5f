from decimal import Decimal
from typing import Dict, Any
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from marketplace.data.models.cart import CartModel
from marketplace.data.models.cart_item import CartItemModel
from marketplace.domain.errors import (
    CartItemNotFound,
    CartNotFound,
    InvalidQuantity,
    ProductNotFound,
    ProductUnavailable,
    UserNotFound,
)
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    One cart per user, created lazily.
    commands (add, update, remove, clear) change state,
    query (get) only reads. Prices are never copied into the cart,
    the cart always shows live catalog prices until checkout.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)

    def get_or_create_cart(self, user_id: int) -> CartModel:
        """
        Return the user's cart, creating it on first access.

        Two concurrent first accesses can both miss the read and both insert.
        The unique constraint on carts.user_id lets exactly one insert win;
        the loser rolls back and re-reads the winner's row instead of
        failing.
        """
        existing = self.repo.get_cart_by_user(user_id)
        if existing:
            return existing

        if not self.users.get_user(user_id):
            raise UserNotFound()

        try:
            created = self.repo.create_cart(CartModel(user_id=user_id))
        except IntegrityError:
            self.repo.rollback()
            existing = self.repo.get_cart_by_user(user_id)
            if existing is None:
                #not the user_id race, e.g. the user was deleted meanwhile
                raise
            logger.info(f"Cart for user {user_id} created concurrently, using cart {existing.id}")
            return existing

        logger.info(f"Created cart {created.id} for user {user_id}")
        return created

    #query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.get_or_create_cart(user_id)
        rows = self.repo.get_cart_view(cart.id)

        items = [
            {
                "id": item.id,
                "product_id": product.id,
                "quantity": item.quantity,
                "title": product.title,
                "price": product.price,
                "is_available": product.is_available,
                "seller_id": product.seller_id,
                "category_name": category_name,
                "seller_name": seller_name,
                "added_at": item.added_at,
            }
            for item, product, category_name, seller_name in rows
        ]
        total = sum((i["price"] * i["quantity"] for i in items), Decimal("0.00"))

        return {
            "cart_id": cart.id,
            "user_id": cart.user_id,
            "items": items,
            "total": total,
        }

    #commands
    def add_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise InvalidQuantity()

        product = self.products.get_product(product_id)
        if not product:
            raise ProductNotFound()
        if not product.is_available:
            raise ProductUnavailable()

        cart = self.get_or_create_cart(user_id)

        # existing line -> quantity grows, no duplicate rows
        if self.repo.increment_item_quantity(cart.id, product_id, quantity):
            self.repo.commit()
            logger.info(f"Increased product {product_id} in cart {cart.id} by {quantity}")
            return self.get_cart(user_id)

        try:
            self.repo.add_cart_item(
                CartItemModel(
                    cart_id=cart.id,
                    product_id=product_id,
                    quantity=quantity,
                )
            )
            self.repo.commit()
            logger.info(f"Added product {product_id} x{quantity} to cart {cart.id}")
        except IntegrityError:
            # the same product was added from another request in between
            self.repo.rollback()
            if not self.repo.increment_item_quantity(cart.id, product_id, quantity):
                raise
            self.repo.commit()
            logger.info(f"Merged concurrent add of product {product_id} into cart {cart.id}")

        return self.get_cart(user_id)

    def update_item(self, user_id: int, item_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise InvalidQuantity()

        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise CartNotFound()

        if not self.repo.set_item_quantity(cart.id, item_id, quantity):
            self.repo.rollback()
            raise CartItemNotFound()
        self.repo.commit()

        logger.info(f"Cart item {item_id} in cart {cart.id} set to quantity {quantity}")
        item = self.repo.get_owned_item(cart.id, item_id)
        return {
            "id": item.id,
            "cart_id": item.cart_id,
            "product_id": item.product_id,
            "quantity": item.quantity,
        }

    def remove_item(self, user_id: int, item_id: int) -> None:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise CartNotFound()

        if not self.repo.delete_cart_item(cart.id, item_id):
            self.repo.rollback()
            raise CartItemNotFound()
        self.repo.commit()

        logger.info(f"Removed item {item_id} from cart {cart.id}")

    def clear_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise CartNotFound()

        removed = self.repo.delete_cart_items(cart.id)
        self.repo.commit()

        logger.info(f"Cleared cart {cart.id}, removed {removed} items")
        return {"cart_id": cart.id, "removed": removed}
