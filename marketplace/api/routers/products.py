# marketplace/api/routers/products.py
from typing import List

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from marketplace.api.errors import to_http
from marketplace.data.database import get_db
from marketplace.domain.errors import MarketplaceError
from marketplace.domain.schemas import (
    CategoryOut,
    ProductCreate,
    ProductListOut,
    ProductOut,
    ProductUpdate,
)
from marketplace.services.catalog_service import CatalogService
from marketplace.utils.settings import DEFAULT_PAGE_SIZE

router = APIRouter(prefix="/products", tags=["products"])


def get_service(db: Session):
    return CatalogService(db)


@router.get("/", response_model=ProductListOut)
def list_products(
    category: int | None = Query(None, gt=0),
    search: str | None = Query(None, max_length=100),
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    return get_service(db).list_products(category, search, page, limit)


@router.get("/categories", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return get_service(db).list_categories()


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        return get_service(db).get_product(product_id)
    except MarketplaceError as e:
        raise to_http(e)


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    try:
        return get_service(db).create_product(user_id, payload)
    except MarketplaceError as e:
        raise to_http(e)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    try:
        return get_service(db).update_product(user_id, product_id, payload)
    except MarketplaceError as e:
        raise to_http(e)


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    try:
        get_service(db).delete_product(user_id, product_id)
    except MarketplaceError as e:
        raise to_http(e)
    return Response(status_code=204)
