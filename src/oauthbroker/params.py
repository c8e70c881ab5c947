#!/usr/bin/env python3
"""Redirect detection and response parameter decoding."""

import logging
from typing import Dict
from urllib.parse import urlsplit, urlunsplit, unquote

logger = logging.getLogger(__name__)

# Portal approval pages may live on a different host than the callback URL
APPROVAL_MARKER = "/oauth2/approval"


def normalize_url(url: str) -> str:
    """Normalize a URL for prefix comparison.

    Lowercases the scheme and host and gives hierarchical URLs with no path
    a ``/`` path, the way browsers report the URIs they load. Userinfo,
    path, query and fragment keep their case.

    Args:
        url: Absolute URL

    Returns:
        Normalized URL
    """
    parts = urlsplit(url)
    userinfo, at, hostport = parts.netloc.rpartition('@')
    netloc = f"{userinfo}{at}{hostport.lower()}"
    path = parts.path or ('/' if netloc else '')
    return urlunsplit((parts.scheme.lower(), netloc, path, parts.query, parts.fragment))


def is_redirect(target_uri: str, callback_url: str) -> bool:
    """Check whether a navigation target is the provider's redirect.

    Args:
        target_uri: URI the browser is about to load
        callback_url: Registered redirect URI of the application

    Returns:
        True if the normalized target starts with the normalized callback
        URL, or both contain the approval marker
    """
    if not target_uri or not callback_url:
        return False

    if normalize_url(target_uri).startswith(normalize_url(callback_url)):
        return True

    return APPROVAL_MARKER in callback_url and APPROVAL_MARKER in target_uri


def decode_parameters(uri: str) -> Dict[str, str]:
    """Decode OAuth response parameters from a redirect URI.

    The fragment is used when present, the query string otherwise. Values
    are percent-decoded, keys are taken as-is. A segment without ``=`` maps
    to an empty value. When a key repeats, the last occurrence wins.

    Args:
        uri: Redirect URI returned by the authorization server

    Returns:
        Mapping of parameter name to decoded value (possibly empty)
    """
    parts = urlsplit(uri)
    answer = parts.fragment or parts.query

    params: Dict[str, str] = {}
    for segment in answer.split('&'):
        if not segment:
            continue

        key, sep, value = segment.partition('=')
        if key in params:
            logger.debug(f"Duplicate response parameter '{key}', keeping last value")
        params[key] = unquote(value) if sep else ''

    logger.debug(f"Decoded response parameters: {', '.join(sorted(params)) or '(none)'}")
    return params
