import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.models.user import User
from app.schemas.user import (
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
    UserCreate,
    UserLogin,
    UserOut,
    VerifyEmailRequest,
)
from app.schemas.tokens import LoginResponse, ResetPasswordResponse
from app.services.auth_service import AuthService
from app.utils.auth import get_current_user
from app.utils.dependencies import get_auth_service
from app.utils.errors import (
    ConflictError,
    DeliveryError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    UnverifiedError,
    ValidationError,
)

router = APIRouter()

logger = logging.getLogger(__name__)


def _internal_error(operation: str) -> HTTPException:
    logger.exception(f"Unexpected error in {operation}")
    return HTTPException(status_code=500, detail="Internal server error")


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, auth_service: AuthService = Depends(get_auth_service)):
    try:
        message = auth_service.register(user)
        return {"message": message}
    except (ValidationError, ConflictError) as e:
        raise HTTPException(status_code=400, detail=e.message)
    except DeliveryError as e:
        raise HTTPException(status_code=500, detail=e.message)
    except Exception:
        raise _internal_error("register")


@router.post("/login", response_model=LoginResponse)
def login(user: UserLogin, auth_service: AuthService = Depends(get_auth_service)):
    try:
        token, db_user = auth_service.login(user.email, user.password)
        return {"message": "Login successful", "token": token, "user": db_user}
    except (InvalidCredentialsError, UnverifiedError) as e:
        raise HTTPException(status_code=401, detail=e.message)
    except Exception:
        raise _internal_error("login")


@router.post("/verify-email", response_model=MessageResponse)
def verify_email(payload: VerifyEmailRequest, auth_service: AuthService = Depends(get_auth_service)):
    try:
        auth_service.verify_email(payload.email, payload.otp)
        return {"message": "Email verified successfully. Please login."}
    except (NotFoundError, InvalidTokenError) as e:
        raise HTTPException(status_code=400, detail=e.message)
    except Exception:
        raise _internal_error("verify_email")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(payload: ForgotPasswordRequest, auth_service: AuthService = Depends(get_auth_service)):
    try:
        auth_service.forgot_password(payload.email)
        return {"message": "Password reset code sent to your email"}
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except DeliveryError as e:
        raise HTTPException(status_code=500, detail=e.message)
    except Exception:
        raise _internal_error("forgot_password")


@router.post("/reset-password", response_model=ResetPasswordResponse)
def reset_password(payload: ResetPasswordRequest, auth_service: AuthService = Depends(get_auth_service)):
    try:
        token = auth_service.reset_password(payload.email, payload.otp, payload.password)
        return {"message": "Password reset successfully", "token": token}
    except (ValidationError, InvalidTokenError) as e:
        raise HTTPException(status_code=400, detail=e.message)
    except Exception:
        raise _internal_error("reset_password")


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
