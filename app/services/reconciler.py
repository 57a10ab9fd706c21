"""Folds redirect verification results back into a comparison result."""

from typing import Dict, Mapping, Optional

from .sitemap import LinkIndex
from ..models.progress import ProgressTracker
from ..models.comparison import ComparisonResult, PageDiff, Redirect
from ..config import ProgressMilestones, DEFAULT_MILESTONES
from ..logger import get_logger

logger = get_logger('reconciler')


def _apply_redirects(diff: PageDiff, redirects: Mapping[str, Optional[str]]) -> PageDiff:
    """Move every verified redirect of a page from missing to redirected."""
    still_missing = []
    for link in diff.missing:
        target = redirects.get(link)
        if target is not None:
            diff.redirected.append(Redirect(source=link, target=target))
        else:
            still_missing.append(link)
    diff.missing = still_missing
    return diff


def _demote_unknown_targets(page: str, diff: PageDiff, new_index: LinkIndex) -> int:
    """Undo redirects whose target the new site never links to.

    Returns:
        Number of demoted redirects
    """
    kept = []
    demoted = 0
    for redirect in diff.redirected:
        if redirect.target in new_index:
            kept.append(redirect)
            continue

        logger.info(
            "Page %r: %r redirects to unknown %r, keeping it as missing",
            page, redirect.source, redirect.target
        )
        diff.missing.append(redirect.source)
        demoted += 1
    diff.redirected = kept
    return demoted


def reconcile(result: ComparisonResult,
              redirects: Mapping[str, Optional[str]],
              new_index: LinkIndex,
              progress: Optional[ProgressTracker] = None,
              milestones: ProgressMilestones = DEFAULT_MILESTONES) -> ComparisonResult:
    """Reclassify verified redirects and discard false positives.

    The first pass moves each redirected link out of ``missing`` on every page
    that lists it. The second pass checks each redirect target against the new
    site's link index and pushes redirects to unknown targets (typically a
    catch-all landing page) back to ``missing``. Confirmed redirect targets are
    then no longer reported as ``extra`` on the same page.

    Args:
        result: Output of the diff phase; left untouched
        redirects: Mapping link-slug -> redirect target slug or None
        new_index: Link index of the new sitemap
        progress: Optional progress tracker
        milestones: Progress fractions of each phase

    Returns:
        New ComparisonResult
    """
    if progress:
        progress.report(milestones.reconcile, "Reconciling redirects")

    reconciled = result.copy()
    pages: Dict[str, PageDiff] = reconciled.pages

    if any(target is not None for target in redirects.values()):
        for diff in pages.values():
            _apply_redirects(diff, redirects)

    demoted = 0
    for page, diff in pages.items():
        if diff.redirected:
            demoted += _demote_unknown_targets(page, diff, new_index)

    for diff in pages.values():
        if diff.redirected and diff.extra:
            targets = {redirect.target for redirect in diff.redirected}
            diff.extra = [link for link in diff.extra if link not in targets]

    if demoted:
        logger.info("Demoted %d redirects with unknown targets", demoted)

    return reconciled
