"""Canonical hash and reversible encoding of a set of flag keys."""

from __future__ import annotations

import base64
import binascii
import gzip
import hashlib
import logging
import zlib
from collections.abc import Iterable

from flagctl.core.model import Flag

LOGGER = logging.getLogger(__name__)

_DELIMITER = "|"


def flag_keys(flags: Iterable[Flag | None] | None) -> list[str]:
    if flags is None:
        return []
    return [flag.key for flag in flags if flag is not None and flag.key]


def calculate_hash(options: Iterable[str | None] | None) -> str:
    """SHA-256 of the lower-cased, sorted, ``|``-joined keys; ``""`` for no input."""
    if options is None:
        return ""
    keys = sorted(option.lower() for option in options if option is not None)
    if not keys:
        return ""
    combined = _DELIMITER.join(keys)
    return hashlib.sha256(combined.encode("utf-8")).hexdigest()


def hash_flags(flags: Iterable[Flag | None] | None) -> str:
    return calculate_hash(flag_keys(flags))


def encode_options(options: Iterable[str | None] | None) -> str:
    if options is None:
        return ""
    keys = sorted({option.upper() for option in options if option is not None and option.strip()})
    if not keys:
        return ""
    combined = _DELIMITER.join(keys).encode("utf-8")
    # mtime is fixed so the same key set always yields the same string.
    compressed = gzip.compress(combined, compresslevel=9, mtime=0)
    return _to_base64url(compressed)


def encode_flags(flags: Iterable[Flag | None] | None) -> str:
    return encode_options(flag_keys(flags))


def decode_options(encoded: str | None) -> list[str] | None:
    """Keys packed by :func:`encode_options`, or ``None`` if ``encoded`` is unusable."""
    if not encoded:
        return None
    try:
        compressed = _from_base64url(encoded)
        combined = gzip.decompress(compressed).decode("utf-8")
    except (binascii.Error, ValueError, OSError, EOFError, zlib.error) as exc:
        LOGGER.debug("Could not decode configuration string %r: %s", encoded, exc)
        return None
    return [key for key in combined.split(_DELIMITER) if key]


def _to_base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _from_base64url(text: str) -> bytes:
    padding = (4 - len(text) % 4) % 4
    return base64.b64decode(text + "=" * padding, altchars=b"-_", validate=True)
