"""
Good4Work NFT Tools - Metadata Hashing

Computes the deterministic digest of a metadata document used for on-chain
verification. Documents are serialized as compact JSON in insertion key order
(keys are NOT sorted), UTF-8 encoded, then hashed with SHA-256. Reordering keys
changes the digest, so documents must be hashed exactly as the builder
assembled them.
"""

import hashlib
import json
from typing import Any, Mapping

from .exceptions import SerializationError

HASH_PREFIX = "0x"


def canonical_bytes(document: Mapping[str, Any]) -> bytes:
    """
    Serialize a document to its canonical byte representation.

    Raises:
        SerializationError: If the document contains cycles, NaN/Infinity or
            values JSON cannot represent
    """
    try:
        serialized = json.dumps(
            document,
            separators=(',', ':'),
            ensure_ascii=False,
            allow_nan=False
        )
    except (TypeError, ValueError, RecursionError) as e:
        raise SerializationError(f"Metadata cannot be canonically serialized: {e}") from e

    return serialized.encode('utf-8')


def compute_metadata_hash(document: Mapping[str, Any]) -> str:
    """Compute the ``0x``-prefixed SHA-256 digest of a metadata document."""
    return HASH_PREFIX + hashlib.sha256(canonical_bytes(document)).hexdigest()


def verify_metadata_hash(document: Mapping[str, Any], expected_hash: str) -> bool:
    """Check a document against a previously computed digest."""
    expected = expected_hash.lower()
    if not expected.startswith(HASH_PREFIX):
        expected = HASH_PREFIX + expected
    return compute_metadata_hash(document) == expected
