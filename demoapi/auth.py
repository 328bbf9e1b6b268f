import logging
from collections.abc import Mapping
from typing import Any

import jwt
from starlette.authentication import (
    AuthCredentials,
    AuthenticationBackend,
    SimpleUser,
)
from starlette.requests import HTTPConnection

from swagauth import AllOf, Authenticated, AuthzPolicy, HasClaim

from .config import JwtSettings
from .keys import load_public_key

logger = logging.getLogger(__name__)

# Security groups (policies) of the APIs. Modify when adding a security group to the APIs.
SECURITY_GROUPS = ["Administrator", "Manager"]


def security_group_policies(groups: list[str] = SECURITY_GROUPS) -> dict[str, AuthzPolicy]:
    """Creates one policy per security group, satisfied by authenticated members of the group."""
    return {group: AllOf(Authenticated(), HasClaim("groups", group)) for group in groups}


class ClaimsUser(SimpleUser):
    """An authenticated user described by the claims of its token."""

    def __init__(self, claims: Mapping[str, Any]) -> None:
        super().__init__(str(claims.get("email", "")))
        self.claims = dict(claims)

    @property
    def display_name(self) -> str:
        return " ".join(
            part for part in (self.claims.get("given_name"), self.claims.get("family_name")) if part
        ) or self.username


class JwtAuthBackend(AuthenticationBackend):
    """Authenticates requests carrying an RS256 bearer token in the `Authorization` header."""

    def __init__(self, settings: JwtSettings) -> None:
        self.settings = settings
        self.public_key = load_public_key(settings.public_key)

    async def authenticate(self, conn: HTTPConnection):
        authorization = conn.headers.get("Authorization")
        if not authorization:
            return None

        # A request without a usable token is unauthenticated; endpoints that need a user reject it with a 401
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            logger.info("Ignored authorization header with scheme %s", scheme or "(none)")
            return None

        try:
            claims = jwt.decode(
                token.strip(),
                self.public_key,
                algorithms=["RS256"],
                audience=self.settings.audience,
                issuer=self.settings.issuer,
                options={"require": ["exp", "iss", "aud"]},
            )
        except jwt.PyJWTError as exc:
            logger.info("Rejected bearer token: %s", exc)
            return None

        groups = claims.get("groups") or []
        if not isinstance(groups, (list, tuple, set)):
            groups = [groups]
        groups = [str(group) for group in groups]
        return AuthCredentials(["authenticated", *groups]), ClaimsUser(claims)
