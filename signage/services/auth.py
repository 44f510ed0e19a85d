import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from signage.services.errors import UnauthorizedError
from signage.settings import (
    ACTIVATION_CODE_TTL_HOURS,
    JWT_EXPIRES_MIN,
    JWT_REFRESH_EXPIRES_DAYS,
    JWT_REFRESH_SECRET,
    JWT_SECRET,
    PLAYER_JWT_EXPIRES_MIN,
    PLAYER_JWT_SECRET,
    PLAYER_REFRESH_EXPIRES_DAYS,
)

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACTIVATION_CODE_LENGTH = 6
_ACTIVATION_ALPHABET = string.ascii_uppercase + string.digits

USER_ACCESS = "user"
USER_REFRESH = "user-refresh"
PLAYER_ACCESS = "player"
PLAYER_REFRESH = "player-refresh"

_SECRETS = {
    USER_ACCESS: JWT_SECRET,
    USER_REFRESH: JWT_REFRESH_SECRET,
    PLAYER_ACCESS: PLAYER_JWT_SECRET,
    PLAYER_REFRESH: PLAYER_JWT_SECRET,
}


@dataclass(frozen=True)
class UserPrincipal:
    user_id: int
    customer_id: int
    email: str
    role: str
    assigned_site_id: int | None = None


@dataclass(frozen=True)
class PlayerPrincipal:
    player_id: int
    customer_id: int
    site_id: int


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def generate_activation_code() -> tuple[str, datetime]:
    code = "".join(secrets.choice(_ACTIVATION_ALPHABET) for _ in range(ACTIVATION_CODE_LENGTH))
    return code, datetime.utcnow() + timedelta(hours=ACTIVATION_CODE_TTL_HOURS)


def _encode(claims: dict, token_type: str, lifetime: timedelta) -> str:
    issued = datetime.now(timezone.utc)
    payload = {
        **claims,
        "type": token_type,
        "iat": issued,
        "exp": issued + lifetime,
        # Two tokens minted in the same second must still differ.
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(payload, _SECRETS[token_type], algorithm=ALGORITHM)


def issue_user_tokens(user) -> dict:
    claims = {
        "sub": str(user.id),
        "customerId": user.customer_id,
        "email": user.email,
        "role": user.role,
        "assignedSiteId": user.assigned_site_id,
    }
    return {
        "access_token": _encode(claims, USER_ACCESS, timedelta(minutes=JWT_EXPIRES_MIN)),
        "refresh_token": _encode(
            {"sub": str(user.id), "customerId": user.customer_id},
            USER_REFRESH,
            timedelta(days=JWT_REFRESH_EXPIRES_DAYS),
        ),
        "expires_in": JWT_EXPIRES_MIN * 60,
    }


def issue_player_access_token(player) -> str:
    claims = {"sub": str(player.id), "customerId": player.customer_id, "siteId": player.site_id}
    return _encode(claims, PLAYER_ACCESS, timedelta(minutes=PLAYER_JWT_EXPIRES_MIN))


def issue_player_refresh_token(player) -> tuple[str, datetime]:
    lifetime = timedelta(days=PLAYER_REFRESH_EXPIRES_DAYS)
    token = _encode({"sub": str(player.id), "customerId": player.customer_id}, PLAYER_REFRESH, lifetime)
    return token, datetime.utcnow() + lifetime


def decode_token(token: str, expected_type: str) -> dict:
    try:
        claims = jwt.decode(token, _SECRETS[expected_type], algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise UnauthorizedError("Token has expired", code="TOKEN_EXPIRED") from exc
    except jwt.InvalidTokenError as exc:
        logger.warning("Rejected %s token: %s", expected_type, exc)
        raise UnauthorizedError("Invalid token", code="INVALID_TOKEN") from exc
    if claims.get("type") != expected_type:
        raise UnauthorizedError("Invalid token type", code="INVALID_TOKEN")
    return claims


def decode_principal(token: str) -> UserPrincipal | PlayerPrincipal:
    """Verify an access token with the secret its ``type`` claim selects."""
    try:
        unverified = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as exc:
        raise UnauthorizedError("Invalid token", code="INVALID_TOKEN") from exc

    token_type = unverified.get("type")
    if token_type not in (USER_ACCESS, PLAYER_ACCESS):
        raise UnauthorizedError("Invalid token type", code="INVALID_TOKEN")

    claims = decode_token(token, token_type)
    try:
        if token_type == PLAYER_ACCESS:
            return PlayerPrincipal(
                player_id=int(claims["sub"]),
                customer_id=int(claims["customerId"]),
                site_id=int(claims["siteId"]),
            )
        return UserPrincipal(
            user_id=int(claims["sub"]),
            customer_id=int(claims["customerId"]),
            email=claims["email"],
            role=claims["role"],
            assigned_site_id=claims.get("assignedSiteId"),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise UnauthorizedError("Invalid token claims", code="INVALID_TOKEN") from exc
