# marketplace/services/catalog_service.py
import math
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel
from marketplace.domain.errors import ConflictError, InvalidStateError, ProductNotFound, UserNotFound
from marketplace.domain.schemas import ProductCreate, ProductUpdate
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def clamp_page(page: int, limit: int) -> tuple[int, int, int]:
    page = max(1, page)
    limit = min(MAX_PAGE_SIZE, max(1, limit))
    return page, limit, (page - 1) * limit


def product_to_dict(
    product: ProductModel,
    category_name: str | None = None,
    seller_name: str | None = None,
) -> Dict[str, Any]:
    return {
        "id": product.id,
        "seller_id": product.seller_id,
        "category_id": product.category_id,
        "title": product.title,
        "description": product.description,
        "price": product.price,
        "condition": product.condition,
        "image_url": product.image_url,
        "is_available": product.is_available,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
        "category_name": category_name,
        "seller_name": seller_name,
    }


class CatalogService:
    """
    Catalog Store: products owned by sellers, plus categories.
    Reads are public, writes are scoped to the product's seller.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)
        self.users = UserRepo(db)

    #query
    def list_products(
        self,
        category_id: int | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        page, limit, offset = clamp_page(page, limit)
        search = search.strip() if search else None

        total = self.repo.count_available(category_id, search)
        rows = self.repo.list_available(limit, offset, category_id, search)

        return {
            "products": [product_to_dict(p, category, seller) for p, category, seller in rows],
            "pagination": {
                "page": page,
                "limit": limit,
                "count": len(rows),
                "total": total,
                "total_pages": math.ceil(total / limit),
            },
        }

    def list_seller_products(self, seller_id: int, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
        """A seller's own listings, available or not, newest first."""
        if not self.users.get_user(seller_id):
            raise UserNotFound()

        page, limit, offset = clamp_page(page, limit)
        total = self.repo.count_by_seller(seller_id)
        rows = self.repo.list_by_seller(seller_id, limit, offset)

        return {
            "products": [product_to_dict(p, category, seller) for p, category, seller in rows],
            "pagination": {
                "page": page,
                "limit": limit,
                "count": len(rows),
                "total": total,
                "total_pages": math.ceil(total / limit),
            },
        }

    def get_product(self, product_id: int) -> Dict[str, Any]:
        row = self.repo.get_product_details(product_id)
        if not row:
            raise ProductNotFound()
        product, category, seller = row
        return product_to_dict(product, category, seller)

    def list_categories(self):
        return self.repo.list_categories()

    #commands
    def create_product(self, seller_id: int, payload: ProductCreate) -> Dict[str, Any]:
        if not self.users.get_user(seller_id):
            raise UserNotFound()
        if not self.repo.get_category(payload.category_id):
            raise InvalidStateError("Category does not exist")

        product = ProductModel(
            seller_id=seller_id,
            category_id=payload.category_id,
            title=payload.title,
            description=payload.description,
            price=payload.price,
            condition=payload.condition,
            image_url=payload.image_url or "placeholder.jpg",
            is_available=True,
        )
        self.repo.add_product(product)
        self.repo.commit()

        logger.info(f"Seller {seller_id} listed product {product.id} at {product.price}")
        return self.get_product(product.id)

    def update_product(self, seller_id: int, product_id: int, payload: ProductUpdate) -> Dict[str, Any]:
        product = self.repo.get_seller_product(product_id, seller_id)
        if not product:
            raise ProductNotFound()

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "category_id" in changes and not self.repo.get_category(changes["category_id"]):
            raise InvalidStateError("Category does not exist")

        for field, value in changes.items():
            setattr(product, field, value)
        self.repo.commit()

        logger.info(f"Seller {seller_id} updated product {product_id}: {sorted(changes)}")
        return self.get_product(product_id)

    def delete_product(self, seller_id: int, product_id: int) -> None:
        product = self.repo.get_seller_product(product_id, seller_id)
        if not product:
            raise ProductNotFound()

        try:
            self.repo.delete_product(product)
            self.repo.commit()
        except IntegrityError:
            #order_items keep a reference, history must stay intact
            self.repo.rollback()
            raise ConflictError("Product has order history; mark it unavailable instead")

        logger.info(f"Seller {seller_id} deleted product {product_id}")
