import base64
import hashlib
import secrets
from dataclasses import dataclass

from listing_hub.core.config import settings


@dataclass(frozen=True)
class AccessTokenParts:
    prefix: str
    plain: str
    hashed: str


def generate_access_token(prefix_len: int = 8) -> AccessTokenParts:
    # Example: lh_<prefix>_<random>
    raw = secrets.token_urlsafe(32)
    prefix = raw[:prefix_len]
    plain = f"lh_{prefix}_{raw}"
    hashed = hash_access_token(plain)
    return AccessTokenParts(prefix=prefix, plain=plain, hashed=hashed)


def hash_access_token(plain: str) -> str:
    # Pepper protects against rainbow tables if DB leaks.
    salted = (plain + settings.token_pepper.get_secret_value()).encode("utf-8")
    digest = hashlib.sha256(salted).digest()
    return base64.b64encode(digest).decode("utf-8")
