"""Deterministic bucketing for flag evaluation.

Every bucket value is derived from a BLAKE3 digest over::

    utf8(flag_key) || tag || utf8(identifier)

Two fixed single-byte tags separate the purposes the digest is used for, so
the gate decision and the variant pick of the same user come from unrelated
bits:

- ``GATE_TAG`` (``b":"``): first digest byte modulo 100, compared against the
  rollout percentage.
- ``VARIANT_TAG`` (``b"/"``): first four digest bytes as an unsigned 32-bit
  little-endian integer, reduced modulo the total variant weight.

These rules are a compatibility contract. Any other implementation that uses
the same hash, encoding and extraction produces identical assignments.
"""

from __future__ import annotations

from blake3 import blake3

GATE_TAG = b":"
VARIANT_TAG = b"/"

DIGEST_SIZE = 32
GATE_BUCKETS = 100


def bucket(tag: bytes, key: str, identifier: str) -> bytes:
    """Hash ``key || tag || identifier`` into a 32-byte BLAKE3 digest.

    Args:
        tag: Domain-separation tag (``GATE_TAG`` or ``VARIANT_TAG``).
        key: Flag key.
        identifier: Caller identity. The empty string is a valid identity.

    Returns:
        The 256-bit digest.
    """
    hasher = blake3()
    hasher.update(key.encode("utf-8"))
    hasher.update(tag)
    hasher.update(identifier.encode("utf-8"))
    return hasher.digest()


def gate_bucket(key: str, identifier: str) -> int:
    """Return the gate bucket value in ``[0, 99]`` for a key and identifier."""
    return bucket(GATE_TAG, key, identifier)[0] % GATE_BUCKETS


def variant_value(key: str, identifier: str) -> int:
    """Return the raw 32-bit variant selection value for a key and identifier.

    Callers reduce this modulo the total variant weight.
    """
    digest = bucket(VARIANT_TAG, key, identifier)
    return int.from_bytes(digest[:4], "little", signed=False)


__all__ = [
    "DIGEST_SIZE",
    "GATE_BUCKETS",
    "GATE_TAG",
    "VARIANT_TAG",
    "bucket",
    "gate_bucket",
    "variant_value",
]
