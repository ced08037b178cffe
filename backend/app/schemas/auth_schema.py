from typing import Optional

from pydantic import EmailStr, constr

from app.schemas.base_schema import CamelModel
from app.schemas.user_schema import UserResponse


class RegisterRequest(CamelModel):
    first_name: constr(strip_whitespace=True, min_length=1, max_length=255)
    last_name: constr(strip_whitespace=True, min_length=1, max_length=255)
    email: EmailStr
    password: constr(min_length=1)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class JwtResponse(CamelModel):
    token: str
    refresh_token: Optional[str] = None
    token_type: str = "Bearer"
    user: Optional[UserResponse] = None
