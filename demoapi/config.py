import logging
import os
from collections.abc import Mapping
from typing import Optional

import cattrs
from attr import frozen
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENVIRONMENT_VARIABLES = {
    "private_key": "JWT_PRIVATE_KEY",
    "public_key": "JWT_PUBLIC_KEY",
    "issuer": "JWT_ISSUER",
    "audience": "JWT_AUDIENCE",
    "expires": "JWT_EXPIRES",
}


class ConfigurationError(RuntimeError):
    """Raised when the settings cannot be loaded from the environment."""


@frozen
class JwtSettings:
    """
    The settings used to issue and validate tokens.

    The keys are base64-encoded DER: a PKCS#1 (or PKCS#8) RSA private key, and a SubjectPublicKeyInfo public key.
    Use `tools/generate_keys.py` to create a pair.
    """

    private_key: str
    public_key: str
    issuer: str
    audience: str
    expires: int = 3600


converter = cattrs.Converter()


def load_settings(environ: Optional[Mapping[str, str]] = None) -> JwtSettings:
    """
    Loads the JWT settings from the environment. A `.env` file is read first when using the process environment.

    Args:
        environ (Mapping[str, str], optional): The variables to read. Defaults to `os.environ`.

    Raises:
        ConfigurationError: A required variable is missing or a value is malformed.

    Returns:
        JwtSettings: The settings.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ
    values = {name: environ[key] for name, key in ENVIRONMENT_VARIABLES.items() if environ.get(key)}
    missing = [ENVIRONMENT_VARIABLES[name] for name in ("private_key", "public_key", "issuer", "audience") if name not in values]
    if missing:
        raise ConfigurationError(f"Missing environment variables: {', '.join(missing)}")
    try:
        settings = converter.structure(values, JwtSettings)
    except cattrs.ClassValidationError as exc:
        raise ConfigurationError(f"Invalid JWT settings: {exc}") from exc
    logger.debug("Loaded JWT settings for issuer %s, audience %s", settings.issuer, settings.audience)
    return settings
