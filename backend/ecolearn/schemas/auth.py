from __future__ import annotations
from pydantic import Field
from datetime import datetime
from typing import Literal
from ecolearn.schemas.base import ApiModel

AdminRole = Literal["admin", "super_admin"]

class AdminLoginRequest(ApiModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=128)

class AdminPublic(ApiModel):
    id: str
    username: str
    full_name: str
    role: AdminRole
    is_active: bool
    last_login: datetime | None = None

class AdminLoginResponse(ApiModel):
    success: bool = True
    token: str
    admin: AdminPublic
