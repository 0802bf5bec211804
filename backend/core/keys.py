# backend/core/keys.py

import logging
from dataclasses import dataclass
from pathlib import Path
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from backend.config import Settings


logger = logging.getLogger(__name__)

PRIVATE_KEY_FILE = "private.pem"
PUBLIC_KEY_FILE = "public.pem"


@dataclass(frozen=True)
class KeyPair:
    signing_key: str
    verification_key: str
    algorithm: str


def generate_rsa_pem() -> tuple[str, str]:
    """
    Generates a 2048-bit RSA key and returns (private_pem, public_pem).
    """
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")
    return private_pem, public_pem


def load_or_create_rsa_pair(keys_dir: Path) -> tuple[str, str]:
    private_path = keys_dir / PRIVATE_KEY_FILE
    public_path = keys_dir / PUBLIC_KEY_FILE

    if private_path.exists() and public_path.exists():
        return private_path.read_text(), public_path.read_text()

    private_pem, public_pem = generate_rsa_pem()
    keys_dir.mkdir(parents=True, exist_ok=True)
    private_path.write_text(private_pem)
    private_path.chmod(0o600)
    public_path.write_text(public_pem)
    logger.info("Generated new RSA key pair in %s", keys_dir)
    return private_pem, public_pem


def key_pair(settings: Settings) -> KeyPair:
    """
    Returns the keys used to sign and verify access tokens.
    A configured JWT secret wins over the RSA pair on disk.
    """
    if settings.jwt_secret_key:
        return KeyPair(settings.jwt_secret_key, settings.jwt_secret_key, "HS256")

    private_pem, public_pem = load_or_create_rsa_pair(Path(settings.keys_dir))
    return KeyPair(private_pem, public_pem, "RS256")
