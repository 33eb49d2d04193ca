# app/utils/auth.py
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from app.config.settings import Settings, get_settings
from app.models.user import User
from app.services.auth_service import AuthService
from app.utils.dependencies import get_auth_service
from app.utils.errors import UnauthenticatedError
from app.utils.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

def get_current_user(
    token: str = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """Resolve the bearer token to the authenticated user, or reject with 401."""
    try:
        user_id = decode_access_token(token, settings)
        user = auth_service.get_user(user_id)
        if user is None:
            raise UnauthenticatedError("User not found")
    except UnauthenticatedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user
