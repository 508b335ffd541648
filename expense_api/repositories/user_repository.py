from sqlalchemy.orm import Session
from expense_api.models.user import User


class UserRepository:
    """Repository for User model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> User | None:
        """Get user by internal ID"""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> User | None:
        """Get user by email (case-insensitive)"""
        return self.db.query(User).filter(User.email == email.lower()).first()

    def get_all(self) -> list[User]:
        return self.db.query(User).order_by(User.id).all()

    def create(self, user: User) -> User:
        """
        Create a new user.

        Raises:
            IntegrityError: If the email is already registered
        """
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def update(self, user: User) -> User:
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete_no_commit(self, user: User) -> None:
        """Delete user and memberships. Caller responsible for commit."""
        self.db.delete(user)
        self.db.flush()
