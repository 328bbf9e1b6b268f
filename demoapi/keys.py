import base64

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


def generate_key_pair(key_size: int = 2048) -> tuple[str, str]:
    """
    Generates an RSA key pair in the format `JwtSettings` expects.

    Returns:
        tuple[str, str]: The base64 DER private key (PKCS#1) and public key (SubjectPublicKeyInfo).
    """
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_der = private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_der = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return base64.b64encode(private_der).decode("ascii"), base64.b64encode(public_der).decode("ascii")


def load_private_key(private_key: str) -> rsa.RSAPrivateKey:
    key = serialization.load_der_private_key(base64.b64decode(private_key), password=None)
    if not isinstance(key, rsa.RSAPrivateKey):
        raise ValueError("The private key is not an RSA key")
    return key


def load_public_key(public_key: str) -> rsa.RSAPublicKey:
    key = serialization.load_der_public_key(base64.b64decode(public_key))
    if not isinstance(key, rsa.RSAPublicKey):
        raise ValueError("The public key is not an RSA key")
    return key
