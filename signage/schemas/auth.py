from datetime import datetime
from typing import Literal

from pydantic import Field

from signage.schemas.common import APIModel, UpdateModel

UserRole = Literal["Admin", "Editor", "Viewer", "SiteManager"]


class UserOut(APIModel):
    id: int
    customer_id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str
    assigned_site_id: int | None = None
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime | None = None


class RegisterIn(APIModel):
    subdomain: str = Field(..., min_length=2, max_length=100, pattern=r"^[a-z0-9-]+$")
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)


class LoginIn(APIModel):
    subdomain: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshIn(APIModel):
    refresh_token: str = Field(..., min_length=1)


class TokensOut(APIModel):
    access_token: str
    refresh_token: str
    expires_in: int
    user: UserOut


class UserCreate(APIModel):
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    role: UserRole = "Viewer"
    assigned_site_id: int | None = Field(None, gt=0)


class UserUpdate(UpdateModel):
    not_nullable = ("role", "is_active")

    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    role: UserRole | None = None
    assigned_site_id: int | None = Field(None, gt=0)
    is_active: bool | None = None
    password: str | None = Field(None, min_length=8, max_length=128)


class PlayerActivateIn(APIModel):
    player_code: str = Field(..., min_length=1, max_length=50)
    activation_code: str = Field(..., min_length=1, max_length=20)


class PlayerTokensOut(APIModel):
    player_id: int
    customer_id: int
    site_id: int
    access_token: str
    refresh_token: str
    expires_in: int


class AccessTokenOut(APIModel):
    access_token: str
    expires_in: int
