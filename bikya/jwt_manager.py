import logging
from datetime import datetime, timedelta, timezone

import jwt

from bikya.custom_types import DictWithStringKeys, TokenScope
from bikya.env import jwt_secret_key

DECRYPT_ALGORITHM = "HS256"

logger = logging.getLogger(__name__)


def get_expiration_time(scope: TokenScope) -> int:
    if scope == TokenScope.USER:
        return 24 * 60 * 60  # 1 day
    else:
        raise ValueError("Invalid token scope")


def _secret(secret_key: str | None) -> str:
    if not secret_key:
        raise ValueError("JWT secret key not set")
    return secret_key


def create_jwt_token(
    payload: DictWithStringKeys, scope: TokenScope, secret_key: str | None = None
) -> str:
    claims = {
        "scope": scope.name,
        scope.name: payload,
        "exp": datetime.now(timezone.utc)
        + timedelta(seconds=get_expiration_time(scope)),
    }
    return jwt.encode(
        claims, _secret(secret_key or jwt_secret_key), algorithm=DECRYPT_ALGORITHM
    )


def verify_jwt_token(
    token: str, scope: TokenScope, secret_key: str | None = None
) -> DictWithStringKeys:
    try:
        payload = jwt.decode(
            token,
            _secret(secret_key or jwt_secret_key),
            algorithms=[DECRYPT_ALGORITHM],
        )
        if payload.get("scope") != scope.name:
            raise jwt.InvalidTokenError(
                f"Invalid token scope - expected: {scope.name}, got: {payload.get('scope')}"
            )
        return payload[scope.name]  # data lives under the scope name
    except jwt.ExpiredSignatureError:
        raise ValueError("Token has expired")
    except (jwt.InvalidTokenError, KeyError):
        logger.info(f"Rejected token for scope {scope.name}")
        raise ValueError("Invalid token")
