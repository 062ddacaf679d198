"""
metadata.py - Metadata URL and Ownership Guard

The metadata URL is informational state for external consumers. Nothing in
the ledger reads it. Only TokenInfo.owner may change it.
"""

from __future__ import annotations
import re
from urllib.parse import urlsplit

from .core import InvalidMetadataUrl, Unauthorized
from .state import load_token_info, load_metadata_url, save_metadata_url
from .store import KeyValueStore


_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")

# Schemes whose URLs are meaningless without a host.
_HOST_REQUIRED_SCHEMES = frozenset({"http", "https", "ftp", "ws", "wss"})


def validate_metadata_url(url: str) -> str:
    """
    Check that url parses as a well-formed absolute URL.

    Rules:
      - non-empty string without whitespace or control characters
      - a syntactically valid scheme
      - something after the scheme
      - a host for http(s)/ftp/ws(s), and a numeric port if one is given

    Returns:
        The url unchanged.

    Raises:
        InvalidMetadataUrl: If any rule fails.
    """
    if not isinstance(url, str) or not url:
        raise InvalidMetadataUrl("Invalid metadata URL: empty")
    if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7f for ch in url):
        raise InvalidMetadataUrl(f"Invalid metadata URL: contains whitespace: {url!r}")

    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError for a non-numeric or out-of-range port
    except ValueError as e:
        raise InvalidMetadataUrl(f"Invalid metadata URL: {url!r}: {e}") from e

    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        raise InvalidMetadataUrl(f"Invalid metadata URL: missing scheme: {url!r}")
    if not (parts.netloc or parts.path):
        raise InvalidMetadataUrl(f"Invalid metadata URL: nothing after scheme: {url!r}")
    if parts.scheme.lower() in _HOST_REQUIRED_SCHEMES and not parts.hostname:
        raise InvalidMetadataUrl(f"Invalid metadata URL: missing host: {url!r}")
    return url


def get_metadata(store: KeyValueStore) -> str:
    return load_metadata_url(store)


def update_metadata(store: KeyValueStore, caller: str, new_url: str) -> str:
    """
    Replace the metadata URL.

    Authorization is checked before the URL.

    Raises:
        Unauthorized: If caller is not the token owner.
        InvalidMetadataUrl: If new_url is malformed.
    """
    info = load_token_info(store)
    if caller != info.owner:
        raise Unauthorized("Unauthorized")
    save_metadata_url(store, validate_metadata_url(new_url))
    return new_url
