"""Bearer-token authentication for the API.

Tokens are issued elsewhere; this module only verifies them. The payload
carries the caller as ``{"user": {"id": ..., "role": "user" | "admin"}}``.
"""

from dataclasses import dataclass
from functools import lru_cache

import jwt
from fastapi import Depends, Header

from marketplace.config import get_settings
from marketplace.exceptions import AuthenticationError, ForbiddenError
from marketplace.utils.logging import bind_request_context


@dataclass(frozen=True)
class Identity:
    id: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class JWTVerifier:
    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self.secret = secret
        self.algorithm = algorithm

    def verify(self, token: str) -> Identity:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired") from None
        except jwt.InvalidTokenError:
            raise AuthenticationError("User is not authorized") from None

        user = payload.get("user")
        if not isinstance(user, dict) or not user.get("id"):
            raise AuthenticationError("User is not authorized")
        return Identity(id=str(user["id"]), role=user.get("role") or "user")


@lru_cache(maxsize=1)
def get_verifier() -> JWTVerifier:
    settings = get_settings()
    return JWTVerifier(settings.access_token_secret, settings.access_token_algorithm)


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------
def current_identity(authorization: str | None = Header(default=None)) -> Identity:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise AuthenticationError("User is not authorized or token is missing")

    identity = get_verifier().verify(authorization.split(" ", 1)[1].strip())
    bind_request_context(user_id=identity.id, role=identity.role)
    return identity


def require_admin(identity: Identity = Depends(current_identity)) -> Identity:
    if not identity.is_admin:
        raise ForbiddenError("Access denied. Admins only.")
    return identity
