"""
Session tokens and the request gates that guard routes.

A route lists the gates it needs; FastAPI resolves them in order before the handler
runs and `verify_jwt` is evaluated once per request even when several gates depend
on it. Any rejection raises and the handler is never reached.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, NamedTuple, Optional

import jwt
from fastapi import Depends, Header, HTTPException

import config
import database
from schemas import Role, role_of

logger = logging.getLogger("summerchamp.auth")

UNAUTHORIZED = "unauthorized access!"
FORBIDDEN = "forbidden message"
IDENTITY_MISMATCH = "unauthorized Access"


class TokenResult(NamedTuple):
    ok: bool
    claims: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None


def sign_token(claims: Dict[str, Any]) -> str:
    payload = dict(claims)
    payload["exp"] = datetime.now(timezone.utc) + timedelta(minutes=config.JWT_EXPIRES_MINUTES)
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def verify_token(token: str) -> TokenResult:
    try:
        claims = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return TokenResult(False, reason="expired")
    except jwt.InvalidTokenError as exc:
        return TokenResult(False, reason=f"invalid: {exc}")
    if not claims.get("email"):
        return TokenResult(False, reason="missing email claim")
    return TokenResult(True, claims=claims)


def verify_jwt(authorization: Optional[str] = Header(None)) -> Dict[str, Any]:
    if not authorization:
        logger.warning("rejected request: no authorization header")
        raise HTTPException(status_code=401, detail=UNAUTHORIZED)
    # "Bearer <token>"
    parts = authorization.split(" ", 1)
    token = parts[1].strip() if len(parts) == 2 else ""
    result = verify_token(token)
    if not result.ok:
        logger.warning("rejected token: %s", result.reason)
        raise HTTPException(status_code=401, detail=UNAUTHORIZED)
    return result.claims


def _require_role(claims: Dict[str, Any], role: Role) -> Dict[str, Any]:
    user = database.find_document(database.USERS, {"email": claims["email"]})
    if role_of(user) is not role:
        logger.warning("rejected %s: role is not %s", claims["email"], role.value)
        raise HTTPException(status_code=403, detail=FORBIDDEN)
    return claims


def verify_admin(claims: Dict[str, Any] = Depends(verify_jwt)) -> Dict[str, Any]:
    return _require_role(claims, Role.admin)


def verify_instructor(claims: Dict[str, Any] = Depends(verify_jwt)) -> Dict[str, Any]:
    return _require_role(claims, Role.instructor)


def verify_self(email: str, claims: Dict[str, Any] = Depends(verify_jwt)) -> Dict[str, Any]:
    """Only the owner of the `{email}` path segment may call the route."""
    if claims["email"] != email:
        logger.warning("rejected %s: token email does not match path", claims["email"])
        raise HTTPException(status_code=402, detail=IDENTITY_MISMATCH)
    return claims
