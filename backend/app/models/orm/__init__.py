# app/models/orm/__init__.py
from .user import User
from .category import Category
from .task import Task, Priority
from .revoked_token import RevokedToken
from .base import Base
