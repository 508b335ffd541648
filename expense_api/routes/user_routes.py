from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from expense_api.database import get_db
from expense_api.dependencies import get_current_user
from expense_api.models.user import User
from expense_api.services.user_service import UserService
from expense_api.schemas.user_schemas import (
    UserCreate,
    UserUpdate,
    UserResponse,
    LoginRequest,
    TokenResponse,
)

router = APIRouter()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register_user(data: UserCreate, db: Session = Depends(get_db)):
    """
    Register a new user.

    - Email must be unique
    - Password is stored hashed (bcrypt)
    - Pending invitations are NOT accepted automatically
    """
    service = UserService(db)
    return service.register(data)


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email and password for a bearer token"""
    service = UserService(db)
    return TokenResponse(access_token=service.login(data))


@router.get("", response_model=list[UserResponse])
def list_users(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List all registered users"""
    service = UserService(db)
    return service.list_users()


@router.get("/me", response_model=UserResponse)
def get_me(user: User = Depends(get_current_user)):
    """Get the authenticated user"""
    return user


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get a user by ID"""
    service = UserService(db)
    return service.get_user(user_id)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    data: UserUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Update a user profile.

    - Only the user themself may update their profile
    - Only provided fields are updated
    """
    service = UserService(db)
    return service.update_user(user_id, data, user)


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Delete a user account.

    - Only the user themself may delete their account
    - Personal expenses and memberships are removed
    - Group expenses the user created stay with the group
    """
    service = UserService(db)
    service.delete_user(user_id, user)
    return {"message": "User deleted successfully", "deleted_user_id": user_id}
