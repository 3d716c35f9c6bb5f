# marketplace/data/init_db.py
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from marketplace.data.database import Base
from marketplace.data import models  # noqa: F401  registers every table
from marketplace.data.seed import seed
from marketplace.utils.retry import db_retry
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@db_retry()
def init_db(engine: Engine) -> None:
    logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    with Session(engine) as db:
        seed(db)
