"""
URL canonicalization and the filter applied to discovered links before they
enter the frontier.
"""

import re
from typing import Optional
from urllib.parse import quote, urlsplit, urlunsplit


ALLOWED_SCHEMES = ('http', 'https')
DEFAULT_PORTS = {'http': 80, 'https': 443}

# Characters percent-encoded when they appear literally
UNSAFE_PATH_CHARS = re.compile(r'[ "<>`{}]')
UNSAFE_QUERY_CHARS = re.compile(r'[ "<>]')
URL_NOISE_CHARS = re.compile(r'[\t\n\r]')

SINGLE_DOT_SEGMENTS = ('.', '%2e')
DOUBLE_DOT_SEGMENTS = ('..', '.%2e', '%2e.', '%2e%2e')

# Checked against the full normalized URL, in order
SKIP_PATTERNS = [
    re.compile(r'\.(pdf|zip|tar|gz|jpg|jpeg|png|gif|svg|webp|mp4|mp3|css|js)$', re.IGNORECASE),
    re.compile(r'/(wp-admin|wp-content|admin|login|signin|signup|register)', re.IGNORECASE),
    re.compile(r'#'),
    re.compile(r'javascript:', re.IGNORECASE),
    re.compile(r'mailto:', re.IGNORECASE),
    re.compile(r'tel:', re.IGNORECASE),
]


def normalize_url(raw: str) -> Optional[str]:
    """
    Canonicalize an absolute http(s) URL.

    Lowercases scheme and host, drops default ports and the fragment,
    resolves ``.`` and ``..`` path segments, percent-encodes spaces and other
    unsafe characters, and strips trailing slashes from the path unless the
    path is just ``/``.
    An empty path becomes ``/`` so ``https://a.com`` and ``https://a.com/``
    compare equal.

    Args:
        raw: Absolute URL string

    Returns:
        The normalized URL, or None if it is unparseable or not http(s)
    """
    if not isinstance(raw, str) or not raw.strip():
        return None

    try:
        parsed = urlsplit(URL_NOISE_CHARS.sub('', raw.strip()))
        scheme = parsed.scheme.lower()
        if scheme not in ALLOWED_SCHEMES:
            return None

        hostname = parsed.hostname
        if not hostname:
            return None

        port = parsed.port
    except ValueError:
        return None

    netloc = f'[{hostname}]' if ':' in hostname else hostname
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f'{netloc}:{port}'

    if parsed.username is not None:
        userinfo = parsed.username
        if parsed.password is not None:
            userinfo = f'{userinfo}:{parsed.password}'
        netloc = f'{userinfo}@{netloc}'

    path = _encode_unsafe(UNSAFE_PATH_CHARS, _remove_dot_segments(parsed.path or '/'))
    if path != '/':
        path = path.rstrip('/') or '/'

    query = _encode_unsafe(UNSAFE_QUERY_CHARS, parsed.query)

    return urlunsplit((scheme, netloc, path, query, ''))


def _remove_dot_segments(path: str) -> str:
    output = []
    segments = path.split('/')
    for segment in segments:
        lowered = segment.lower()
        if lowered in SINGLE_DOT_SEGMENTS:
            continue
        if lowered in DOUBLE_DOT_SEGMENTS:
            # Never climb above the leading empty segment
            if len(output) > 1:
                output.pop()
            continue
        output.append(segment)

    # "/a/b/.." resolves to the directory "/a/"
    if segments[-1].lower() in SINGLE_DOT_SEGMENTS + DOUBLE_DOT_SEGMENTS:
        output.append('')

    return '/'.join(output) or '/'


def _encode_unsafe(pattern, value: str) -> str:
    return pattern.sub(lambda match: quote(match.group()), value)


def get_hostname(url: str) -> Optional[str]:
    """Return the lowercased hostname of a URL, or None if it has none."""
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def should_crawl(url: str, seed_url: str, same_domain_only: bool = True) -> bool:
    """
    Decide whether a discovered link may be added to the frontier.

    Args:
        url: Normalized candidate URL
        seed_url: Normalized seed URL of the crawl
        same_domain_only: Require the candidate to share the seed's hostname

    Returns:
        True if the link should be enqueued
    """
    if same_domain_only:
        hostname = get_hostname(url)
        if hostname is None or hostname != get_hostname(seed_url):
            return False

    return not any(pattern.search(url) for pattern in SKIP_PATTERNS)
