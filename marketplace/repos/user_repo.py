from typing import Any, Dict

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from marketplace.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_email_or_username(self, email: str, username: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(or_(UserModel.email == email, UserModel.username == username))
        ).scalars().first()

    def username_taken(self, username: str, exclude_user_id: int) -> bool:
        return self.db.execute(
            select(UserModel.id).where(UserModel.username == username, UserModel.id != exclude_user_id)
        ).first() is not None

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def update_user(self, user_id: int, values: Dict[str, Any]) -> int:
        result = self.db.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(**values, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
