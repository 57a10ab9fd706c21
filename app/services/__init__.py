"""Services for the Link Parity Checker."""

from .url_utils import URLNormalizer, canonicalize, get_base_domain, build_probe_url
from .sitemap import (
    SitemapNormalizer,
    SitemapValidationError,
    validate_sitemap,
    normalize_sitemap,
    build_link_index,
)
from .comparator import LinkDiffer, DiffOutcome, SiteComparator, compare_sitemaps
from .verifier import RedirectVerifier, VerificationOutcome, verify_redirects
from .reconciler import reconcile

__all__ = [
    'URLNormalizer',
    'canonicalize',
    'get_base_domain',
    'build_probe_url',
    'SitemapNormalizer',
    'SitemapValidationError',
    'validate_sitemap',
    'normalize_sitemap',
    'build_link_index',
    'LinkDiffer',
    'DiffOutcome',
    'SiteComparator',
    'compare_sitemaps',
    'RedirectVerifier',
    'VerificationOutcome',
    'verify_redirects',
    'reconcile',
]
