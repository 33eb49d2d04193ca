# app/schemas/tokens.py
from app.schemas.base import CamelModel
from app.schemas.user import UserOut

class LoginResponse(CamelModel):
    message: str
    token: str
    user: UserOut

class ResetPasswordResponse(CamelModel):
    message: str
    token: str
