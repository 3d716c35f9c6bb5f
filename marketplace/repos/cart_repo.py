# marketplace/repos/cart_repo.py
from typing import Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from marketplace.data.models.cart import CartModel
from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.category import CategoryModel
from marketplace.data.models.product import ProductModel
from marketplace.data.models.user import UserModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        #IntegrityError from unique(user_id) propagates to the caller
        self.db.add(cart)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def get_owned_item(self, cart_id: int, item_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.id == item_id,
                CartItemModel.cart_id == cart_id,
            )
        ).scalar_one_or_none()

    def get_cart_lines(self, cart_id: int) -> Sequence:
        """
        Cart items joined with the current product rows.

        populate_existing forces the product columns to be reloaded even if
        the objects already sit in the session, so availability and price are
        always what the database holds right now.
        """
        return self.db.execute(
            select(CartItemModel, ProductModel)
            .join(ProductModel, CartItemModel.product_id == ProductModel.id)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.added_at.desc(), CartItemModel.id.desc())
            .execution_options(populate_existing=True)
        ).all()

    def get_cart_view(self, cart_id: int) -> Sequence:
        return self.db.execute(
            select(CartItemModel, ProductModel, CategoryModel.name, UserModel.username)
            .join(ProductModel, CartItemModel.product_id == ProductModel.id)
            .join(CategoryModel, ProductModel.category_id == CategoryModel.id)
            .join(UserModel, ProductModel.seller_id == UserModel.id)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.added_at.desc(), CartItemModel.id.desc())
            .execution_options(populate_existing=True)
        ).all()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def increment_item_quantity(self, cart_id: int, product_id: int, quantity: int) -> int:
        #quantity = quantity + n evaluated by the database
        result = self.db.execute(
            update(CartItemModel)
            .where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
            .values(quantity=CartItemModel.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def set_item_quantity(self, cart_id: int, item_id: int, quantity: int) -> int:
        result = self.db.execute(
            update(CartItemModel)
            .where(
                CartItemModel.id == item_id,
                CartItemModel.cart_id == cart_id,
            )
            .values(quantity=quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_cart_item(self, cart_id: int, item_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(
                CartItemModel.id == item_id,
                CartItemModel.cart_id == cart_id,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_cart_items(self, cart_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.cart_id == cart_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
