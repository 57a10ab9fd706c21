"""Sitemap link comparison logic."""

import asyncio
import concurrent.futures
import time
from dataclasses import dataclass, field
from typing import Set, Dict, List, Mapping, Optional

from .sitemap import SitemapNormalizer, NormalizedSitemap, LinkIndex, link_universe
from .verifier import RedirectVerifier, VerificationOutcome
from .reconciler import reconcile
from ..models.progress import ProgressTracker
from ..models.comparison import ComparisonResult, PageDiff
from ..config import (
    ComparisonConfig, ProgressMilestones,
    DEFAULT_COMPARISON_CONFIG, DEFAULT_MILESTONES
)
from ..logger import get_logger

logger = get_logger('comparator')


@dataclass
class DiffOutcome:
    """Output of the diff phase, consumed by verification and reconciliation."""
    result: ComparisonResult
    missing_links: Set[str] = field(default_factory=set)
    skipped_pages: List[str] = field(default_factory=list)


class LinkDiffer:
    """Computes per-page missing and extra links between two normalized sitemaps."""

    def __init__(self,
                 progress: Optional[ProgressTracker] = None,
                 milestones: ProgressMilestones = DEFAULT_MILESTONES):
        self.progress = progress
        self.milestones = milestones

    def diff(self,
             old_norm: NormalizedSitemap,
             new_norm: NormalizedSitemap,
             new_index: LinkIndex) -> DiffOutcome:
        """Diff two normalized sitemaps.

        An old page is compared only if it survives on the new site, either
        as a page of its own or as the target of some new-site link. Links of
        a surviving page that the new site never links to are missing; links
        of new pages that the old site never linked to are extra.

        Args:
            old_norm: Normalized old sitemap
            new_norm: Normalized new sitemap
            new_index: Link index of the new sitemap

        Returns:
            DiffOutcome with empty redirected lists
        """
        pages: Dict[str, PageDiff] = {}
        missing_links: Set[str] = set()
        skipped: List[str] = []

        self._report(self.milestones.missing, "Identifying missing links")

        for page in sorted(old_norm):
            if page not in new_norm and page not in new_index:
                skipped.append(page)
                logger.debug("Page %r not on the new site, skipping", page)
                continue

            page_diff = PageDiff()
            for link in sorted(old_norm[page]):
                if link not in new_index:
                    page_diff.missing.append(link)
                    missing_links.add(link)
            pages[page] = page_diff

        self._report(self.milestones.extra, "Identifying extra links")

        old_links = link_universe(old_norm)
        for page in sorted(new_norm):
            extra = sorted(link for link in new_norm[page] if link not in old_links)
            if extra:
                pages.setdefault(page, PageDiff()).extra.extend(extra)

        logger.info(
            "Diffed %d pages: %d retained, %d skipped, %d distinct missing links",
            len(old_norm), len(old_norm) - len(skipped), len(skipped), len(missing_links)
        )

        return DiffOutcome(
            result=ComparisonResult(pages=pages),
            missing_links=missing_links,
            skipped_pages=skipped
        )

    def _report(self, fraction: float, message: str) -> None:
        if self.progress:
            self.progress.report(fraction, message)


class SiteComparator:
    """Runs a full comparison of an old and a new sitemap."""

    def __init__(self,
                 progress: Optional[ProgressTracker] = None,
                 config: ComparisonConfig = DEFAULT_COMPARISON_CONFIG,
                 milestones: ProgressMilestones = DEFAULT_MILESTONES):
        """Initialize site comparator.

        Args:
            progress: Optional progress tracker
            config: Comparison configuration
            milestones: Progress fractions of each phase
        """
        self.progress = progress
        self.config = config
        self.milestones = milestones

    def compare(self,
                old_sitemap: Mapping[str, List[str]],
                new_sitemap: Mapping[str, List[str]],
                new_site: Optional[str] = None) -> ComparisonResult:
        """Compare two sitemaps and return per-page link differences.

        Args:
            old_sitemap: Raw sitemap of the old site
            new_sitemap: Raw sitemap of the new site
            new_site: Host or base URL of the new site; redirect
                verification is skipped when None

        Returns:
            ComparisonResult

        Raises:
            SitemapValidationError: If either sitemap is malformed
        """
        started = time.time()
        self._report(self.milestones.start, "Starting comparison")

        normalizer = SitemapNormalizer(drop_fragment_pages=self.config.drop_fragment_pages)

        self._report(self.milestones.normalize_old, "Normalizing old sitemap")
        old_norm = normalizer.normalize_old(old_sitemap)

        self._report(self.milestones.normalize_new, "Normalizing new sitemap")
        new_norm, new_index = normalizer.normalize_new(new_sitemap)

        self._report(self.milestones.indexing, f"Indexed {len(new_index)} links on the new site")

        differ = LinkDiffer(progress=self.progress, milestones=self.milestones)
        outcome = differ.diff(old_norm, new_norm, new_index)

        verification = VerificationOutcome()
        if new_site and outcome.missing_links:
            verification = self._run_verification(outcome.missing_links, new_site)
        elif outcome.missing_links:
            logger.info("No new site address given, skipping redirect verification")

        result = reconcile(
            outcome.result, verification.redirects, new_index,
            progress=self.progress, milestones=self.milestones
        )
        result.probes_issued = verification.checked
        result.probes_failed = verification.failed

        if self.progress:
            self.progress.complete("Comparison complete")
            time.sleep(self.config.settle_delay)

        logger.info("Comparison finished in %.1fs: %s", time.time() - started, result.summary())
        return result

    def _run_verification(self, missing_links: Set[str], new_site: str) -> VerificationOutcome:
        """Run the async redirect verifier from synchronous code."""
        verifier = RedirectVerifier(
            new_site,
            config=self.config,
            progress=self.progress,
            milestones=self.milestones
        )

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No running loop, create one
            return asyncio.run(verifier.verify(missing_links))

        # Already inside an event loop, run on a separate thread
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            future = executor.submit(asyncio.run, verifier.verify(missing_links))
            return future.result()

    def _report(self, fraction: float, message: str) -> None:
        if self.progress:
            self.progress.report(fraction, message)


def compare_sitemaps(old_sitemap: Mapping[str, List[str]],
                     new_sitemap: Mapping[str, List[str]],
                     new_site: Optional[str] = None,
                     config: ComparisonConfig = DEFAULT_COMPARISON_CONFIG,
                     progress: Optional[ProgressTracker] = None) -> ComparisonResult:
    """Convenience function to run a single comparison.

    Args:
        old_sitemap: Raw sitemap of the old site
        new_sitemap: Raw sitemap of the new site
        new_site: Host or base URL of the new site
        config: Comparison configuration
        progress: Optional progress tracker

    Returns:
        ComparisonResult
    """
    comparator = SiteComparator(progress=progress, config=config)
    return comparator.compare(old_sitemap, new_sitemap, new_site)
