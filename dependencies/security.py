from dataclasses import dataclass
from typing import Optional, Annotated

from fastapi import Depends, Header, HTTPException

from utils.security import decode_access_token

AuthHeader = Annotated[Optional[str], Header(alias="Authorization")]

ROLES = ("student", "teacher", "admin")


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, rebuilt from the bearer token on every request."""
    user_id: int
    username: str
    role: str


def _unauthorized(detail: str):
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def get_current_user(authorization: AuthHeader = None) -> Principal:
    if not authorization:
        raise _unauthorized("Missing Authorization header")

    # "Bearer <token>"
    try:
        scheme, token = authorization.split(" ", 1)
    except ValueError:
        raise _unauthorized("Invalid Authorization header format")

    if scheme.lower() != "bearer":
        raise _unauthorized("Invalid auth scheme")

    payload = decode_access_token(token.strip())
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    try:
        principal = Principal(
            user_id=int(payload["userId"]),
            username=str(payload["username"]),
            role=str(payload["role"]),
        )
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Malformed token payload")

    if principal.role not in ROLES:
        raise _unauthorized("Unknown role")
    return principal


def require_role(*roles: str):
    """Dependency factory: the caller must hold one of `roles`."""
    def _check(user: Principal = Depends(get_current_user)) -> Principal:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail=f"Requires role: {', '.join(roles)}")
        return user
    return _check


require_student = require_role("student")
require_teacher = require_role("teacher")
require_admin = require_role("admin")
