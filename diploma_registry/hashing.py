"""
Diploma Content Hashing

A content hash is the raw 32-byte SHA-256 digest of a diploma's underlying
document. The registry keys its duplicate index by these exact bytes.
"""

import hashlib
from typing import Any, Optional, Union

CONTENT_HASH_LENGTH = 32


def content_hash(document: Union[bytes, str]) -> bytes:
    """
    Compute the content hash of a document.

    Strings are hashed as their UTF-8 bytes.
    """
    if isinstance(document, str):
        document = document.encode('utf-8')

    return hashlib.sha256(document).digest()


def hash_key(value: Any) -> Optional[bytes]:
    """
    Normalise a bytes-like content hash into an immutable key.

    Returns None for values that are not bytes-like. Length is not checked
    here; that is the issuance gate's job.
    """
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    return None


def to_hex(value: bytes) -> str:
    """Lowercase hex encoding of a content hash."""
    return value.hex()


def from_hex(value: str) -> bytes:
    """
    Decode a hex content hash.

    Accepts an optional "0x" prefix. Raises ValueError on invalid hex.
    The decoded length is not checked.
    """
    if value.startswith(("0x", "0X")):
        value = value[2:]
    return bytes.fromhex(value)


def verify_content_hash(declared: bytes, document: Union[bytes, str]) -> bool:
    """Check that a document matches a declared content hash."""
    key = hash_key(declared)
    if key is None or len(key) != CONTENT_HASH_LENGTH:
        return False
    return content_hash(document) == key
