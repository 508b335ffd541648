import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from expense_api.models.user import User
from expense_api.repositories.expense_repository import ExpenseRepository
from expense_api.repositories.user_repository import UserRepository
from expense_api.schemas.user_schemas import UserCreate, UserUpdate, LoginRequest
from expense_api.core.security import hash_password, verify_password, create_access_token
from expense_api.core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
)

logger = structlog.get_logger()


class UserService:
    """Service for registration, login and self-service profile changes"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository(db)
        self.expense_repo = ExpenseRepository(db)

    def register(self, data: UserCreate) -> User:
        """
        Register a new user.

        Pending group invitations for the email are left untouched; joining
        a group always requires presenting the invitation token.

        Raises:
            ConflictException: If the email is already registered
        """
        if self.repo.get_by_email(data.email):
            raise ConflictException("Email is already registered")

        user = User(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
        )
        try:
            user = self.repo.create(user)
        except IntegrityError:
            self.db.rollback()
            raise ConflictException("Email is already registered")

        logger.info("user_registered", user_id=user.id)
        return user

    def login(self, data: LoginRequest) -> str:
        """
        Verify credentials and issue an access token.

        Raises:
            UnauthorizedException: If email or password is wrong
        """
        user = self.repo.get_by_email(data.email)
        if not user or not verify_password(data.password, user.password_hash):
            logger.info("login_failed", email=data.email)
            raise UnauthorizedException("Invalid credentials")
        return create_access_token(user.id, user.email)

    def get_user(self, user_id: int) -> User:
        """
        Raises:
            NotFoundException: If no such user
        """
        user = self.repo.get_by_id(user_id)
        if not user:
            raise NotFoundException("User not found")
        return user

    def list_users(self) -> list[User]:
        return self.repo.get_all()

    def update_user(self, user_id: int, data: UserUpdate, current_user: User) -> User:
        """
        Update the caller's own profile.

        Raises:
            NotFoundException: If no such user
            ForbiddenException: If updating someone else
            ConflictException: If the new email is taken
        """
        user = self.get_user(user_id)
        if user.id != current_user.id:
            raise ForbiddenException("You can only update your own profile")

        if data.email is not None and data.email != user.email:
            if self.repo.get_by_email(data.email):
                raise ConflictException("Email is already registered")
            user.email = data.email
        if data.username is not None:
            user.username = data.username
        if data.password is not None:
            user.password_hash = hash_password(data.password)

        try:
            return self.repo.update(user)
        except IntegrityError:
            self.db.rollback()
            raise ConflictException("Email is already registered")

    def delete_user(self, user_id: int, current_user: User) -> None:
        """
        Delete the caller's own account.

        Personal expenses and memberships go with the account. Group
        expenses the user created stay with the group, without a creator.

        Raises:
            NotFoundException: If no such user
            ForbiddenException: If deleting someone else
        """
        user = self.get_user(user_id)
        if user.id != current_user.id:
            raise ForbiddenException("You can only delete your own account")
        try:
            self.expense_repo.delete_personal_for_user_no_commit(user.id)
            released = self.expense_repo.release_group_expenses_no_commit(user.id)
            self.repo.delete_no_commit(user)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("user_deleted", user_id=user_id, group_expenses_kept=released)
