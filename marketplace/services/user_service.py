from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.data.models.user import UserModel
from marketplace.domain.errors import ConflictError, UserNotFound
from marketplace.domain.schemas import ProfileOut, UserCreate, UserRead, UserUpdate
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        email = payload.email.lower()
        if self.repo.get_by_email_or_username(email, payload.username):
            raise ConflictError("User with this email or username already exists")

        user = UserModel(
            email=email,
            username=payload.username,
            full_name=payload.full_name,
            phone=payload.phone,
            address=payload.address,
        )
        try:
            created = self.repo.create_user(user)
        except IntegrityError:
            #concurrent registration with the same email/username
            self.repo.rollback()
            raise ConflictError("User with this email or username already exists")

        logger.info(f"Registered user {created.id} ({created.username})")
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise UserNotFound()
        return UserRead.model_validate(user)

    def get_profile(self, user_id: int) -> ProfileOut:
        """The caller's own record, including contact details."""
        user = self.repo.get_user(user_id)
        if not user:
            raise UserNotFound()
        return ProfileOut.model_validate(user)

    def update_profile(self, user_id: int, payload: UserUpdate) -> ProfileOut:
        if not self.repo.get_user(user_id):
            raise UserNotFound()

        # null means "keep", same as leaving the field out
        changes = payload.model_dump(exclude_none=True)
        if "username" in changes and self.repo.username_taken(changes["username"], user_id):
            raise ConflictError("Username is already taken")

        try:
            self.repo.update_user(user_id, changes)
            self.repo.commit()
        except IntegrityError:
            self.repo.rollback()
            raise ConflictError("Username is already taken")

        logger.info(f"User {user_id} updated profile fields {sorted(changes)}")
        return self.get_profile(user_id)
