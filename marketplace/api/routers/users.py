from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from marketplace.api.errors import to_http
from marketplace.data.database import get_db
from marketplace.domain.errors import MarketplaceError
from marketplace.services.catalog_service import CatalogService
from marketplace.services.user_service import UserService
from marketplace.domain.schemas import ProductListOut, ProfileOut, UserCreate, UserRead, UserUpdate
from marketplace.utils.settings import DEFAULT_PAGE_SIZE

router = APIRouter(prefix="/users", tags=["users"])

@router.post("/", response_model=UserRead, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.create_user(payload)
    except MarketplaceError as e:
        raise to_http(e)

# fixed paths first, "/{user_id}" would swallow them
@router.get("/profile", response_model=ProfileOut)
def get_profile(user_id: int = Query(...), db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.get_profile(user_id)
    except MarketplaceError as e:
        raise to_http(e)

@router.put("/profile", response_model=ProfileOut)
def update_profile(payload: UserUpdate, user_id: int = Query(...), db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.update_profile(user_id, payload)
    except MarketplaceError as e:
        raise to_http(e)

@router.get("/my-products", response_model=ProductListOut)
def get_my_products(
    user_id: int = Query(...),
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    service = CatalogService(db)
    try:
        return service.list_seller_products(user_id, page, limit)
    except MarketplaceError as e:
        raise to_http(e)

@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.get_user(user_id)
    except MarketplaceError as e:
        raise to_http(e)
