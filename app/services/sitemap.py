"""Sitemap validation and normalization.

A raw sitemap maps page URLs to the list of link URLs found on each page.
Normalizing turns both into slugs so that two sites on different hosts can
be compared path by path.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Set, Optional, Tuple

from .url_utils import URLNormalizer
from ..logger import get_logger

logger = get_logger('sitemap')

# page-slug -> set of link-slugs on that page
NormalizedSitemap = Dict[str, Set[str]]
# link-slug -> set of page-slugs that link to it
LinkIndex = Dict[str, Set[str]]


class SitemapValidationError(ValueError):
    """Raised when a sitemap payload cannot be compared."""

    def __init__(self, message: str, site: str, page: Optional[str] = None):
        super().__init__(message)
        self.site = site
        self.page = page


def validate_sitemap(sitemap, site: str, allow_empty: bool = True) -> None:
    """Check that a payload has the page -> list-of-links shape.

    Args:
        sitemap: Raw sitemap payload
        site: 'old' or 'new', used in error messages
        allow_empty: Whether a sitemap without pages is acceptable

    Raises:
        SitemapValidationError: On the first offending page
    """
    if not isinstance(sitemap, Mapping):
        raise SitemapValidationError(
            f"The {site} sitemap must be an object mapping page URLs to link lists, "
            f"got {type(sitemap).__name__}",
            site=site
        )

    if not sitemap and not allow_empty:
        raise SitemapValidationError(f"The {site} sitemap is empty", site=site)

    for page, links in sitemap.items():
        if not isinstance(links, list):
            raise SitemapValidationError(
                f"Links for page {page!r} in the {site} sitemap must be a list, "
                f"got {type(links).__name__}",
                site=site,
                page=page
            )
        for link in links:
            if not isinstance(link, str):
                raise SitemapValidationError(
                    f"Page {page!r} in the {site} sitemap has a non-string link: {link!r}",
                    site=site,
                    page=page
                )


def normalize_sitemap(sitemap: Mapping[str, List[str]],
                      drop_fragment_pages: bool = False) -> NormalizedSitemap:
    """Canonicalize every page and link of a sitemap.

    Pages whose URLs collapse to the same slug are merged: their link sets
    are unioned.

    Args:
        sitemap: Raw sitemap (page URL -> link URLs)
        drop_fragment_pages: Skip pages whose slug still contains '#'

    Returns:
        NormalizedSitemap
    """
    normalized: NormalizedSitemap = {}
    dropped = 0

    for page, links in sitemap.items():
        page_slug = URLNormalizer.slug(page)
        if drop_fragment_pages and '#' in page_slug:
            dropped += 1
            continue

        page_links = normalized.setdefault(page_slug, set())
        page_links.update(URLNormalizer.slug(link) for link in links)

    if dropped:
        logger.debug("Dropped %d anchor pages", dropped)

    return normalized


def build_link_index(normalized: NormalizedSitemap) -> LinkIndex:
    """Build the reverse index link-slug -> page-slugs.

    Args:
        normalized: Normalized sitemap

    Returns:
        LinkIndex
    """
    index: LinkIndex = {}
    for page, links in normalized.items():
        for link in links:
            index.setdefault(link, set()).add(page)
    return index


def link_universe(normalized: NormalizedSitemap) -> Set[str]:
    """All link-slugs appearing anywhere in a normalized sitemap."""
    universe: Set[str] = set()
    for links in normalized.values():
        universe.update(links)
    return universe


@dataclass(frozen=True)
class SitemapNormalizer:
    """Normalizes the old/new sitemap pair of one comparison run."""
    drop_fragment_pages: bool = True

    def normalize_old(self, sitemap: Mapping[str, List[str]]) -> NormalizedSitemap:
        """Normalize the old sitemap, dropping anchor pages if configured."""
        validate_sitemap(sitemap, 'old')
        return normalize_sitemap(sitemap, drop_fragment_pages=self.drop_fragment_pages)

    def normalize_new(self, sitemap: Mapping[str, List[str]]) -> Tuple[NormalizedSitemap, LinkIndex]:
        """Normalize the new sitemap and build its link index."""
        validate_sitemap(sitemap, 'new', allow_empty=False)
        normalized = normalize_sitemap(sitemap)
        return normalized, build_link_index(normalized)
