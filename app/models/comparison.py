"""Comparison result models.

Key domains used throughout:
    page-slug: canonical slug of a page URL (a key of a normalized sitemap)
    link-slug: canonical slug of a link found on a page
"""

from dataclasses import dataclass, field
from typing import List, Dict


@dataclass(frozen=True)
class Redirect:
    """A missing link that the new site serves at another path."""
    source: str  # link-slug on the old site
    target: str  # link-slug the new site redirected to

    def to_dict(self) -> Dict[str, str]:
        return {'from': self.source, 'to': self.target}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'Redirect':
        """Create from a ``{'from': ..., 'to': ...}`` dict."""
        return cls(source=data['from'], target=data['to'])


@dataclass
class PageDiff:
    """Link differences for a single page-slug."""
    missing: List[str] = field(default_factory=list)
    extra: List[str] = field(default_factory=list)
    redirected: List[Redirect] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.missing or self.extra or self.redirected)

    def copy(self) -> 'PageDiff':
        """Return an independent copy of this diff."""
        return PageDiff(
            missing=list(self.missing),
            extra=list(self.extra),
            redirected=list(self.redirected)
        )

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'missing': self.missing,
            'extra': self.extra,
            'redirected': [r.to_dict() for r in self.redirected]
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'PageDiff':
        """Rebuild a page diff from its serialized form.

        Raises:
            ValueError: If the data is not shaped like a page diff
        """
        if not isinstance(data, dict):
            raise ValueError("Page differences must be an object")
        try:
            return cls(
                missing=list(data.get('missing') or []),
                extra=list(data.get('extra') or []),
                redirected=[Redirect.from_dict(r) for r in data.get('redirected') or []]
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed page differences: {e}") from e


@dataclass
class ComparisonResult:
    """Result of comparing two sitemaps, keyed by page-slug."""

    pages: Dict[str, PageDiff] = field(default_factory=dict)

    # Redirect probe statistics
    probes_issued: int = 0
    probes_failed: int = 0

    @classmethod
    def from_dict(cls, differences: Dict) -> 'ComparisonResult':
        """Rebuild a result from the ``differences`` mapping of :meth:`to_dict`.

        Raises:
            ValueError: If the differences are not keyed by page
        """
        if not isinstance(differences, dict):
            raise ValueError("Differences must be an object keyed by page")

        pages = {}
        for page, diff in differences.items():
            try:
                pages[page] = PageDiff.from_dict(diff)
            except ValueError as e:
                raise ValueError(f"Page {page!r}: {e}") from e
        return cls(pages=pages)

    def __getitem__(self, page: str) -> PageDiff:
        return self.pages[page]

    def __contains__(self, page: str) -> bool:
        return page in self.pages

    def __len__(self) -> int:
        return len(self.pages)

    def copy(self) -> 'ComparisonResult':
        """Return a deep copy; page diffs are not shared with the original."""
        return ComparisonResult(
            pages={page: diff.copy() for page, diff in self.pages.items()},
            probes_issued=self.probes_issued,
            probes_failed=self.probes_failed
        )

    def missing_report(self) -> Dict[str, List[str]]:
        """Flatten to ``{page-slug: [missing links]}``, skipping clean pages."""
        return {
            page: list(diff.missing)
            for page, diff in self.pages.items()
            if diff.missing
        }

    def summary(self) -> Dict[str, int]:
        """Aggregate counts over all pages."""
        return {
            'pages_compared': len(self.pages),
            'pages_with_missing': sum(1 for d in self.pages.values() if d.missing),
            'missing_count': sum(len(d.missing) for d in self.pages.values()),
            'extra_count': sum(len(d.extra) for d in self.pages.values()),
            'redirected_count': sum(len(d.redirected) for d in self.pages.values()),
            'probes_issued': self.probes_issued,
            'probes_failed': self.probes_failed,
        }

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'differences': {page: diff.to_dict() for page, diff in self.pages.items()},
            'summary': self.summary(),
        }
