# server/askbudi/crypto.py
import hashlib
import re
import secrets
from typing import NamedTuple

KEY_TAG = "vibe_"
KEY_PATTERN = re.compile(r"vibe_[0-9a-f]{64}")
PREFIX_LENGTH = 12


class GeneratedKey(NamedTuple):
    secret: str
    digest: str
    display_prefix: str


def hash_api_key(key: str) -> str:
    """Hash an API key for storage (one-way)."""
    return hashlib.sha256(key.encode()).hexdigest()


def get_key_prefix(key: str) -> str:
    """Get the display prefix of an API key for listings."""
    return key[:PREFIX_LENGTH] + "..."


def is_valid_key_format(key: str) -> bool:
    """Cheap shape check done before any database lookup."""
    return bool(key) and KEY_PATTERN.fullmatch(key) is not None


def generate_api_key() -> GeneratedKey:
    """Generate a new API key with vibe_ prefix (256 bits of entropy)."""
    secret = f"{KEY_TAG}{secrets.token_hex(32)}"
    return GeneratedKey(
        secret=secret,
        digest=hash_api_key(secret),
        display_prefix=get_key_prefix(secret),
    )
