"""
SHA-256 verification for downloaded artifacts.

Provides digest computation over a file's full contents, extraction of a
published digest from a checksum response body, and constant-time
comparison between the two.
"""

import hashlib
import logging
import re
import secrets
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

SHA256_HEX_LENGTH = 64

_LEADING_DIGEST = re.compile(r"[a-f0-9]{%d}" % SHA256_HEX_LENGTH)


def compute_file_hash(file_path: Path) -> str:
    """
    Compute the SHA-256 digest of a file.

    Args:
        file_path: Path to file

    Returns:
        Lowercase hex digest

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    hasher = hashlib.sha256()
    with open(file_path, "rb") as f:
        while chunk := f.read(8192):
            hasher.update(chunk)

    return hasher.hexdigest()


def extract_leading_digest(body: Optional[str]) -> Optional[str]:
    """
    Extract a SHA-256 digest from the start of a checksum response body.

    The digest is the first 64 lowercase hex characters at the start of the
    body, after leading whitespace. Any trailing text, including further hex
    characters, is ignored. HTML error pages, empty bodies and truncated
    digests yield None.

    Args:
        body: Response body

    Returns:
        The digest, or None if the body is malformed

    Example:
        >>> extract_leading_digest("<!DOCTYPE html><html>...")
        >>> len(extract_leading_digest("ab" * 32 + "  go1.22.5.linux-amd64.tar.gz"))
        64
    """
    if not body:
        return None

    match = _LEADING_DIGEST.match(body.lstrip())
    return match.group(0) if match else None


def verify_file_hash(file_path: Path, expected_hash: str) -> bool:
    """
    Verify file matches expected SHA-256 digest using constant-time comparison.

    Both digests are lowercased before comparison.

    Args:
        file_path: Path to file
        expected_hash: Expected digest (hex string)

    Returns:
        True if digest matches, False otherwise

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    actual_hash = compute_file_hash(file_path)
    matched = _constant_time_compare(actual_hash, expected_hash.strip().lower())
    if not matched:
        logger.debug(f"Digest mismatch for {file_path.name}: {actual_hash}")
    return matched


def _constant_time_compare(a: str, b: str) -> bool:
    return secrets.compare_digest(a.encode("utf-8"), b.encode("utf-8"))
