# marketplace/repos/product_repo.py
from typing import Any, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from marketplace.data.models.category import CategoryModel
from marketplace.data.models.product import ProductModel
from marketplace.data.models.user import UserModel


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_product_details(self, product_id: int):
        #product + category name + seller username
        return self.db.execute(
            select(ProductModel, CategoryModel.name, UserModel.username)
            .join(CategoryModel, ProductModel.category_id == CategoryModel.id)
            .join(UserModel, ProductModel.seller_id == UserModel.id)
            .where(ProductModel.id == product_id)
        ).first()

    def get_seller_product(self, product_id: int, seller_id: int) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(
                ProductModel.id == product_id,
                ProductModel.seller_id == seller_id,
            )
        ).scalar_one_or_none()

    def _available_filter(self, category_id: int | None, search: str | None) -> list[Any]:
        conditions = [ProductModel.is_available.is_(True)]
        if category_id is not None:
            conditions.append(ProductModel.category_id == category_id)
        if search:
            pattern = f"%{_escape_like(search)}%"
            conditions.append(
                ProductModel.title.ilike(pattern, escape="\\")
                | ProductModel.description.ilike(pattern, escape="\\")
            )
        return conditions

    def count_available(self, category_id: int | None = None, search: str | None = None) -> int:
        return self.db.execute(
            select(func.count(ProductModel.id)).where(*self._available_filter(category_id, search))
        ).scalar_one()

    def list_available(
        self,
        limit: int,
        offset: int,
        category_id: int | None = None,
        search: str | None = None,
    ) -> Sequence:
        return self.db.execute(
            select(ProductModel, CategoryModel.name, UserModel.username)
            .join(CategoryModel, ProductModel.category_id == CategoryModel.id)
            .join(UserModel, ProductModel.seller_id == UserModel.id)
            .where(*self._available_filter(category_id, search))
            .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
            .limit(limit)
            .offset(offset)
        ).all()

    def count_by_seller(self, seller_id: int) -> int:
        return self.db.execute(
            select(func.count(ProductModel.id)).where(ProductModel.seller_id == seller_id)
        ).scalar_one()

    def list_by_seller(self, seller_id: int, limit: int, offset: int) -> Sequence:
        #sold and withdrawn listings included
        return self.db.execute(
            select(ProductModel, CategoryModel.name, UserModel.username)
            .join(CategoryModel, ProductModel.category_id == CategoryModel.id)
            .join(UserModel, ProductModel.seller_id == UserModel.id)
            .where(ProductModel.seller_id == seller_id)
            .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
            .limit(limit)
            .offset(offset)
        ).all()

    def list_categories(self) -> Sequence[CategoryModel]:
        return self.db.execute(select(CategoryModel).order_by(CategoryModel.name)).scalars().all()

    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def delete_product(self, product: ProductModel):
        self.db.delete(product)
        self.db.flush()

    def mark_sold(self, product_id: int) -> int:
        """
        Conditionally flip a product from available to unavailable.

        Returns the rowcount: 0 means somebody else already took it (or the
        seller withdrew it) after our read.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.is_available.is_(True))
            .values(is_available=False, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
