from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import constr

from app.schemas.base_schema import CamelModel


class UserResponse(CamelModel):
    id: int
    email: str
    name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    is_active: bool
    auth_provider: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class UserSummary(CamelModel):
    id: int
    name: str


class UpdateProfileRequest(CamelModel):
    first_name: Optional[constr(strip_whitespace=True, max_length=255)] = None
    last_name: Optional[constr(strip_whitespace=True, max_length=255)] = None
    name: Optional[constr(strip_whitespace=True, max_length=511)] = None
    settings: Optional[Dict[str, Any]] = None


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: constr(min_length=1)
