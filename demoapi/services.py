import logging
import time
from collections.abc import Sequence

import jwt

from .config import JwtSettings
from .keys import load_private_key

logger = logging.getLogger(__name__)


class GenerateTokensService:
    """The generate tokens service."""

    def __init__(self, settings: JwtSettings) -> None:
        self.settings = settings

    def generate_token(
        self,
        private_key: str,
        issuer: str,
        audience: str,
        expires: int,
        email: str,
        given_name: str,
        family_name: str,
        groups: Sequence[str],
    ) -> str:
        """
        Generates a JWT token signed with RS256.

        Args:
            private_key (str): The base64 DER RSA private key.
            issuer (str): The token issuer.
            audience (str): The token audience.
            expires (int): The number of seconds before the token expires.
            email (str): The user email.
            given_name (str): The user's given name.
            family_name (str): The user's family name.
            groups (Sequence[str]): The user's security groups.

        Returns:
            str: A JWT token.
        """
        issued_at = int(time.time())
        claims = {
            "aud": audience,
            "iat": issued_at,
            "exp": issued_at + expires,
            "iss": issuer,
            "email": email,
            "given_name": given_name,
            "family_name": family_name,
            "groups": list(groups),
        }
        logger.debug("Issuing token for %s with groups %s", email, claims["groups"])
        return jwt.encode(claims, load_private_key(private_key), algorithm="RS256")

    def _generate(self, email: str, given_name: str, family_name: str, groups: Sequence[str]) -> str:
        return self.generate_token(
            self.settings.private_key,
            self.settings.issuer,
            self.settings.audience,
            self.settings.expires,
            email,
            given_name,
            family_name,
            groups,
        )

    def generate_user_token_no_groups(self) -> str:
        """Generates a token for an authenticated user with no groups."""
        return self._generate("someone@domain.com", "Some", "User", [])

    def generate_manager_token(self) -> str:
        return self._generate("management@domain.com", "Management", "User", ["Manager"])

    def generate_administrator_token(self) -> str:
        return self._generate("administrator@domain.com", "Administrative", "User", ["Administrator"])

    def generate_manager_administrator_token(self) -> str:
        """Generates a token for a manager with additional administrative privileges."""
        return self._generate(
            "management.administrator@domain.com", "Management", "User w/Administrator", ["Manager", "Administrator"]
        )
