from typing import Optional

from pydantic import constr

from app.schemas.base_schema import CamelModel


class CategoryRequest(CamelModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=100)
    color: Optional[constr(pattern=r"^#[0-9A-Fa-f]{3,8}$")] = None


class CategoryResponse(CamelModel):
    id: int
    name: str
    color: Optional[str] = None
