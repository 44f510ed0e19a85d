from dataclasses import dataclass

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from signage.services.auth import PlayerPrincipal, UserPrincipal, decode_principal
from signage.services.errors import ForbiddenError, UnauthorizedError

WRITE_ROLES = ("Admin", "Editor")
SITE_WRITE_ROLES = ("Admin", "Editor", "SiteManager")

_bearer = HTTPBearer(auto_error=False)


def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> UserPrincipal | PlayerPrincipal:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("No token provided", code="NO_TOKEN")
    return decode_principal(credentials.credentials)


def current_user(principal=Depends(get_principal)) -> UserPrincipal:
    if not isinstance(principal, UserPrincipal):
        raise ForbiddenError("This endpoint requires a user token")
    return principal


def current_player(principal=Depends(get_principal)) -> PlayerPrincipal:
    if not isinstance(principal, PlayerPrincipal):
        raise ForbiddenError("This endpoint requires a player token")
    return principal


def require_roles(*roles: str):
    def dependency(user: UserPrincipal = Depends(current_user)) -> UserPrincipal:
        if user.role not in roles:
            raise ForbiddenError("Insufficient permissions")
        return user

    return dependency


def ensure_site_access(user: UserPrincipal, site_id: int) -> None:
    # SiteManagers only reach the site they are assigned to.
    if user.role == "SiteManager" and user.assigned_site_id != site_id:
        raise ForbiddenError("Access to this site is not allowed")


@dataclass
class Page:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def pagination(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> Page:
    return Page(page=page, limit=limit)
