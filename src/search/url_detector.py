# src/search/url_detector.py
# Responsibility: Recognizes pasted dealer URLs and reduces them to a comparison key.

import re
from typing import Optional
from urllib.parse import urlsplit

_URL_RE = re.compile(
    r'^(?:https?://)?'                     # optional scheme
    r'(?:www\.)?'                          # optional www.
    r'(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+'  # host labels
    r'[a-z]{2,}'                           # domain suffix
    r'(?::\d{1,5})?'                       # optional port
    r'(?:[/?#]\S*)?$',                     # optional path / query
    re.IGNORECASE,
)

_SCHEME_RE = re.compile(r'^https?://', re.IGNORECASE)

MIN_URL_LENGTH = 4


def detect_url(text: Optional[str]) -> Optional[str]:
    """
    Detects whether the query is a URL and returns its comparison key.

    The key has no scheme, no leading 'www.', a lowercase host and no
    trailing slashes, so it can be matched as a case-insensitive substring
    of the stored listing URL.

    Args:
        text (str): Raw user query.

    Returns:
        Optional[str]: The key, or None when the query is not a URL.

    Example:
        detect_url('https://www.example.co.jp/item/42/') -> 'example.co.jp/item/42'
    """
    if not text:
        return None

    candidate = text.replace('\x00', '').strip()
    # A URL never contains unescaped whitespace.
    if len(candidate) < MIN_URL_LENGTH or any(ch.isspace() for ch in candidate):
        return None

    if not _URL_RE.match(candidate):
        return None

    if not _SCHEME_RE.match(candidate):
        candidate = f"http://{candidate}"

    try:
        parts = urlsplit(candidate)
        host = parts.hostname
        port = parts.port  # raises ValueError when out of range
    except ValueError:
        return None

    if not host:
        return None

    if host.startswith('www.'):
        host = host[4:]

    key = host
    if port is not None:
        key = f"{key}:{port}"

    tail = parts.path
    if parts.query:
        tail = f"{tail}?{parts.query}"
    if parts.fragment:
        tail = f"{tail}#{parts.fragment}"

    key = f"{key}{tail}".rstrip('/')
    return key or None
