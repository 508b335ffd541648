from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from expense_api.core.security import extract_user_id
from expense_api.core.exceptions import UnauthorizedException
from expense_api.database import get_db
from expense_api.repositories.user_repository import UserRepository
from expense_api.models.user import User

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    FastAPI dependency to validate JWT and load the user.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using SECRET_KEY
    3. Extract user ID from 'sub' claim
    4. Load the User record (it must still exist)
    5. Return User object for use in endpoints

    Raises:
        HTTPException 401: If header missing, token invalid/expired, or user gone
    """
    try:
        if credentials is None:
            raise UnauthorizedException("Not authenticated")

        user_id = extract_user_id(credentials.credentials)

        user = UserRepository(db).get_by_id(user_id)
        if not user:
            raise UnauthorizedException("User no longer exists")

        return user

    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
