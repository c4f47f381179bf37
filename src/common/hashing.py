"""Hashing utilities."""

import hashlib


def sha256_hex(value: str) -> str:
    """Return the hex SHA-256 digest of a UTF-8 string."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def generate_item_hash(source_key: str, canonical_url: str) -> str:
    """Generate the per-source dedup hash for a trend item."""
    return sha256_hex(f"{source_key}:{canonical_url}")


def generate_cluster_key(member_urls: list[str]) -> str:
    """Generate a stable cluster key from the canonical URLs of its members."""
    joined = "\n".join(sorted(set(member_urls)))
    return hashlib.sha256(f"cluster:{joined}".encode()).hexdigest()[:16]
