"""URL utilities for slug derivation and comparison."""

from urllib.parse import urljoin, urlsplit
import re

from ..config import DEFAULT_COMPARISON_CONFIG

# Relative URLs are resolved against this so parsing never fails on a
# missing scheme or host.
NEUTRAL_BASE = 'http://localhost/'

_SCHEME_HOST_RE = re.compile(r'^(?:[a-zA-Z][a-zA-Z0-9+.\-]*:)?//[^/?#]*')


class URLNormalizer:
    """Derives comparison slugs from raw URLs.

    A slug is the URL's path plus query string, without scheme, host,
    fragment, a trailing slash on the path, or a leading slash.
    """

    @staticmethod
    def slug(url) -> str:
        """Canonicalize a URL into its slug. Never raises.

        Args:
            url: Absolute or relative URL

        Returns:
            Slug string
        """
        try:
            return URLNormalizer.parse_slug(url)
        except (ValueError, TypeError, AttributeError):
            return URLNormalizer.fallback_slug(url)

    @staticmethod
    def parse_slug(url: str) -> str:
        """Structured branch: derive the slug from a parsed URL.

        Raises:
            ValueError: If the URL cannot be parsed
            TypeError: If the URL is not a string
        """
        if not isinstance(url, str):
            raise TypeError(f"URL must be a string, got {type(url).__name__}")

        parsed = urlsplit(urljoin(NEUTRAL_BASE, url.strip()))
        path = parsed.path.rstrip('/')

        if parsed.query:
            path = f"{path}?{parsed.query}"

        return path[1:] if path.startswith('/') else path

    @staticmethod
    def fallback_slug(url) -> str:
        """Textual branch: best-effort slug for input that does not parse."""
        text = str(url).strip()

        text = text.split('#', 1)[0]
        text = _SCHEME_HOST_RE.sub('', text, count=1)

        path, sep, query = text.partition('?')
        text = f"{path.rstrip('/')}{sep}{query}"

        return text[1:] if text.startswith('/') else text


def canonicalize(url) -> str:
    """Shorthand for :meth:`URLNormalizer.slug`."""
    return URLNormalizer.slug(url)


def get_base_domain(url: str, default_scheme: str = DEFAULT_COMPARISON_CONFIG.default_scheme) -> str:
    """Get the base domain URL (scheme + netloc).

    Accepts a bare host ("www.example.com") as well as a full URL.

    Args:
        url: Host or full URL
        default_scheme: Scheme used when the input carries none

    Returns:
        Base domain URL (e.g., 'https://example.com')

    Raises:
        ValueError: If no host can be found
    """
    url = url.strip()
    if '//' not in url:
        url = f"{default_scheme}://{url}"

    parsed = urlsplit(url)
    if not parsed.netloc:
        raise ValueError(f"No host in site address: {url!r}")

    return f"{parsed.scheme}://{parsed.netloc}"


def build_probe_url(base: str, slug: str) -> str:
    """Build the URL that serves ``slug`` on the site at ``base``.

    Args:
        base: Base domain URL (see :func:`get_base_domain`)
        slug: Link slug

    Returns:
        Absolute URL
    """
    return f"{base.rstrip('/')}/{slug}"
