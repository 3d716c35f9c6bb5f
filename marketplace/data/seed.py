# marketplace/data/seed.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.data.models.category import CategoryModel
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CATEGORIES = (
    "Electronics",
    "Furniture",
    "Clothing",
    "Books",
    "Sports",
    "Home & Garden",
    "Other",
)


def seed(db: Session) -> int:
    #only seed if empty
    if db.execute(select(CategoryModel.id).limit(1)).first():
        return 0

    db.add_all(CategoryModel(name=name) for name in DEFAULT_CATEGORIES)
    db.commit()

    logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} default categories")
    return len(DEFAULT_CATEGORIES)
