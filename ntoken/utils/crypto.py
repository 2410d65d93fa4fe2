"""
Hashing and principal-name utilities.
"""

import hashlib
import re

# Account names: up to 12 chars of a-z, 1-5 and '.', not ending with '.'
PRINCIPAL_PATTERN = re.compile(r"^[a-z1-5.]{0,11}[a-z1-5]$")


def sha256(data: bytes) -> bytes:
    """SHA256(data)"""
    return hashlib.sha256(data).digest()


def token_uri_hash(token_uri: str) -> str:
    """256-bit digest of a token URI, hex encoded, used for the uniqueness index."""
    return sha256(token_uri.encode("utf-8")).hex()


def utf8_length(value: str) -> int:
    return len(value.encode("utf-8"))


def is_valid_principal(name: str) -> bool:
    """Check if a string is a well-formed account name."""
    if not name or not isinstance(name, str):
        return False
    return PRINCIPAL_PATTERN.match(name) is not None
