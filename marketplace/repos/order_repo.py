# marketplace/repos/order_repo.py
from typing import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.data.models.product import ProductModel
from marketplace.data.models.user import UserModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        #flush without commit, order_items need the id
        self.db.add(order)
        self.db.flush()
        return order

    def add_order_items(self, items: list[OrderItemModel]) -> list[OrderItemModel]:
        self.db.add_all(items)
        self.db.flush()
        return items

    def set_status(self, order_id: int, status: str) -> int:
        #always bumps updated_at, even when the status value is unchanged
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id)
            .values(status=status, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def get_user_order(self, order_id: int, user_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(
                OrderModel.id == order_id,
                OrderModel.user_id == user_id,
            )
        ).scalar_one_or_none()

    def get_order_for_seller(self, order_id: int, seller_id: int) -> OrderModel | None:
        #any seller with at least one line in the order
        return self.db.execute(
            select(OrderModel)
            .join(OrderItemModel, OrderItemModel.order_id == OrderModel.id)
            .join(ProductModel, OrderItemModel.product_id == ProductModel.id)
            .where(
                OrderModel.id == order_id,
                ProductModel.seller_id == seller_id,
            )
            .limit(1)
        ).scalars().first()

    def get_order_lines(self, order_id: int) -> Sequence:
        return self.db.execute(
            select(OrderItemModel, ProductModel.title, UserModel.username)
            .join(ProductModel, OrderItemModel.product_id == ProductModel.id)
            .join(UserModel, ProductModel.seller_id == UserModel.id)
            .where(OrderItemModel.order_id == order_id)
            .order_by(OrderItemModel.id)
        ).all()

    def list_user_orders(self, user_id: int, limit: int, offset: int) -> Sequence:
        return self.db.execute(
            select(OrderModel, func.count(OrderItemModel.id))
            .outerjoin(OrderItemModel, OrderItemModel.order_id == OrderModel.id)
            .where(OrderModel.user_id == user_id)
            .group_by(OrderModel.id)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .limit(limit)
            .offset(offset)
        ).all()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    def refresh(self, obj):
        self.db.refresh(obj)
