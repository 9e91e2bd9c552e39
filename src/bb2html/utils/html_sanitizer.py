#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/utils/html_sanitizer.py
"""URL validation and markup sanitization.

User-supplied URLs are normalised before they are allowed into ``href`` or
``src`` attributes, and operator-supplied smiley markup can optionally be
cleaned with bleach before it is trusted.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import urlsplit

import bleach

from bb2html.constants import (
    ACCEPTED_IMAGE_EXTENSIONS,
    AUTOLINK_PREFIXES,
    FORBIDDEN_URL_CHARS,
    SMILEY_ALLOWED_ATTRIBUTES,
    SMILEY_ALLOWED_PROTOCOLS,
    SMILEY_ALLOWED_TAGS,
)

logger = logging.getLogger(__name__)

# Dotted host name whose last label contains a letter
_HOSTNAME = re.compile(r"^(?:[^\W_][\w-]*\.)+[^\W\d_][\w-]*$")


def _has_unsafe_chars(value: str) -> bool:
    return any(char.isspace() or unicodedata.category(char) in ("Cc", "Cf") for char in value)


def has_http_scheme(url: str) -> bool:
    """Return True if ``url`` starts with ``http://`` or ``https://`` (any case)."""
    return url[:8].lower().startswith(AUTOLINK_PREFIXES)


def normalize_url(candidate: str) -> Optional[str]:
    """Validate a user-supplied URL and return its normalised form.

    Parameters
    ----------
    candidate : str
        Unescaped URL text

    Returns
    -------
    str or None
        The URL to use, or None if it is not acceptable

    Notes
    -----
    URLs with an explicit ``http``/``https`` scheme must parse with a host.
    Anything else is treated as a bare domain: it may not contain any of
    ``FORBIDDEN_URL_CHARS`` (which includes the ``:`` that would introduce
    another scheme), and ``http://`` is prefixed.

    """
    url = candidate.strip()
    if not url or _has_unsafe_chars(url):
        return None

    if has_http_scheme(url):
        try:
            parts = urlsplit(url)
        except ValueError:
            return None
        if not parts.netloc or not parts.hostname:
            return None
        return url

    if any(char in FORBIDDEN_URL_CHARS for char in url):
        return None

    prefixed = f"http://{url}"
    try:
        hostname = urlsplit(prefixed).hostname
    except ValueError:
        return None
    if not hostname or not _HOSTNAME.match(hostname):
        return None
    return prefixed


def is_image_url(url: str) -> bool:
    """Return True if the path of ``url`` ends in an accepted raster image extension."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return False
    return PurePosixPath(path).suffix.lower() in ACCEPTED_IMAGE_EXTENSIONS


def sanitize_trusted_markup(markup: str) -> str:
    """Clean operator-supplied markup down to a small set of inline tags.

    Only ``<img>`` and ``<span>`` with presentational attributes survive;
    everything else is stripped by bleach.

    Parameters
    ----------
    markup : str
        HTML fragment, typically a smiley replacement

    Returns
    -------
    str
        Cleaned HTML fragment

    """
    cleaned = bleach.clean(
        markup,
        tags=SMILEY_ALLOWED_TAGS,
        attributes=SMILEY_ALLOWED_ATTRIBUTES,
        protocols=SMILEY_ALLOWED_PROTOCOLS,
        strip=True,
    )
    if cleaned != markup:
        logger.debug("Sanitized trusted markup: %r -> %r", markup, cleaned)
    return cleaned
