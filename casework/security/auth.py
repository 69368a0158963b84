from __future__ import annotations

import logging

import jwt
from fastapi import Request
from sqlalchemy.orm import Session

from casework.security.config import SecurityConfig
from casework.security.context import Caller
from casework.security.errors import AuthenticationRequired, IdentityNotFound
from casework.security.roles import parse_role
from casework.security.store import AccessStore
from casework.settings import Settings

logger = logging.getLogger(__name__)


def extract_bearer_token(request: Request, config: SecurityConfig) -> str:
    """
    Read `Authorization: Bearer <token>`.

    Missing header, wrong prefix or empty token are all 401s. The token
    itself is never logged.
    """

    header_name = config.auth.authorization_header
    bearer_prefix = config.auth.bearer_prefix

    raw = request.headers.get(header_name)
    if not raw:
        logger.info("Missing Authorization header (auth required) path=%s method=%s", request.url.path, request.method)
        raise AuthenticationRequired("Authorization header is required")

    prefix = f"{bearer_prefix} "
    if not raw.startswith(prefix):
        logger.warning("Invalid Authorization header format path=%s method=%s", request.url.path, request.method)
        raise AuthenticationRequired("Invalid token format")

    token = raw[len(prefix) :].strip()
    if not token:
        logger.warning("Empty bearer token path=%s method=%s", request.url.path, request.method)
        raise AuthenticationRequired("Invalid token format")

    return token


def authenticate(token: str, config: SecurityConfig, settings: Settings) -> int:
    """
    Turn a bearer token into a user id.

    - provider "dummy": the token is the integer user id (local/dev only)
    - provider "jwt": HS256 (configurable) token signed with `CASEWORK_JWT_SECRET`;
      the user id is read from `auth.user_id_claim` (default `sub`)
    """

    if config.auth.provider == "dummy":
        return _parse_user_id(token)

    if not settings.jwt_secret:
        # Misconfiguration: refuse rather than accept unsigned tokens.
        logger.error("auth.provider=jwt but CASEWORK_JWT_SECRET is not set")
        raise AuthenticationRequired("Invalid or expired token")

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=config.auth.jwt_algorithms,
            options={"require": ["exp"], "verify_exp": True},
        )
    except jwt.ExpiredSignatureError as e:
        logger.info("Token expired")
        raise AuthenticationRequired("Invalid or expired token") from e
    except jwt.InvalidTokenError as e:
        logger.info("Token invalid: %s", type(e).__name__)
        raise AuthenticationRequired("Invalid or expired token") from e

    claim = payload.get(config.auth.user_id_claim)
    if claim is None:
        logger.info("Token missing claim=%s", config.auth.user_id_claim)
        raise AuthenticationRequired("Invalid token claims")
    return _parse_user_id(str(claim))


def _parse_user_id(raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        logger.warning("Caller id is not an integer")
        raise AuthenticationRequired("Invalid token claims") from exc


def load_caller(db: Session, user_id: int) -> Caller:
    """
    Resolve the caller record.

    Unknown or inactive users fail with IdentityNotFound, unknown role keys
    with InvalidRole. The Caller is only built once every field is known.
    """

    user = AccessStore(db).load_user(user_id)
    if user is None or not user.is_active:
        logger.info("Caller not found or inactive user_id=%s", user_id)
        raise IdentityNotFound()

    role = parse_role(user.role)

    return Caller(
        id=user.id,
        role=role,
        office_id=user.office_id,
        department=user.department or None,
    )
