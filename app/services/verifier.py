"""Redirect verification service: checks whether missing links moved on the new site."""

import asyncio
import aiohttp
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

from .url_utils import URLNormalizer, get_base_domain, build_probe_url
from ..models.progress import ProgressTracker
from ..config import (
    ComparisonConfig, ProgressMilestones,
    DEFAULT_COMPARISON_CONFIG, DEFAULT_MILESTONES
)
from ..logger import get_logger

logger = get_logger('verifier')


@dataclass
class VerificationOutcome:
    """Result of redirect verification."""
    redirects: Dict[str, Optional[str]] = field(default_factory=dict)  # link-slug -> new slug or None
    checked: int = 0
    failed: int = 0

    @property
    def redirected(self) -> Dict[str, str]:
        """Only the links that resolved to a different slug."""
        return {source: target for source, target in self.redirects.items() if target is not None}


class RedirectVerifier:
    """Probes the new site for missing links, in fixed-size concurrent batches."""

    def __init__(self,
                 new_site: str,
                 config: ComparisonConfig = DEFAULT_COMPARISON_CONFIG,
                 progress: Optional[ProgressTracker] = None,
                 milestones: ProgressMilestones = DEFAULT_MILESTONES,
                 batch_size: Optional[int] = None):
        """Initialize redirect verifier.

        Args:
            new_site: Host or base URL of the new site
            config: Comparison configuration
            progress: Optional progress tracker
            milestones: Progress fractions of each phase
            batch_size: Probes per batch, defaults to config.batch_size
        """
        self.base_url = get_base_domain(new_site, config.default_scheme)
        self.config = config
        self.progress = progress
        self.milestones = milestones
        self.batch_size = max(1, batch_size or config.batch_size)

    async def verify(self, missing_links: Iterable[str]) -> VerificationOutcome:
        """Probe every missing link and report which ones were redirected.

        Each batch runs fully concurrently; the next batch starts only once
        the whole previous batch has settled.

        Args:
            missing_links: Link slugs flagged as missing

        Returns:
            VerificationOutcome
        """
        candidates = sorted(missing_links)
        total = len(candidates)
        outcome = VerificationOutcome()

        if not candidates:
            return outcome

        logger.info("Verifying %d missing links against %s", total, self.base_url)
        self._report(self.milestones.verify_start, f"Checking redirects 0/{total}")

        timeout = aiohttp.ClientTimeout(total=self.config.probe_timeout)
        connector = aiohttp.TCPConnector(limit=self.batch_size)

        async with aiohttp.ClientSession(
            connector=connector,
            timeout=timeout,
            headers={'User-Agent': self.config.user_agent}
        ) as session:
            for start in range(0, total, self.batch_size):
                batch = candidates[start:start + self.batch_size]
                results = await asyncio.gather(*(self._probe(session, slug) for slug in batch))

                for slug, (target, failed) in zip(batch, results):
                    outcome.redirects[slug] = target
                    outcome.checked += 1
                    if failed:
                        outcome.failed += 1

                    if outcome.checked % self.config.progress_every == 0 or outcome.checked == total:
                        self._report(
                            self.milestones.verification(outcome.checked, total),
                            f"Checking redirects {outcome.checked}/{total}"
                        )

        logger.info(
            "Verification complete: %d redirected, %d failed probes out of %d",
            len(outcome.redirected), outcome.failed, total
        )
        return outcome

    async def _probe(self,
                     session: aiohttp.ClientSession,
                     slug: str) -> Tuple[Optional[str], bool]:
        """Request one slug on the new site.

        Returns:
            Tuple of (redirect target slug or None, whether the probe failed)
        """
        url = build_probe_url(self.base_url, slug)
        try:
            async with session.get(url,
                                   allow_redirects=True,
                                   max_redirects=self.config.max_redirects) as response:
                if not 200 <= response.status < 400:
                    logger.debug("Probe %s answered %d", url, response.status)
                    return None, True

                if not response.history:
                    return None, False

                requested = URLNormalizer.slug(str(response.history[0].url))
                final = URLNormalizer.slug(str(response.url))
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug("Probe %s failed: %s", url, str(e) or type(e).__name__)
            return None, True

        if final == requested:
            return None, False
        return final, False

    def _report(self, fraction: float, message: str) -> None:
        if self.progress:
            self.progress.report(fraction, message)


async def verify_redirects(missing_links: Iterable[str],
                           new_site: str,
                           progress: Optional[ProgressTracker] = None,
                           concurrency: int = 10,
                           config: ComparisonConfig = DEFAULT_COMPARISON_CONFIG) -> Dict[str, Optional[str]]:
    """Convenience function to verify missing links.

    Args:
        missing_links: Link slugs flagged as missing
        new_site: Host or base URL of the new site
        progress: Optional progress tracker
        concurrency: Probes per batch
        config: Comparison configuration

    Returns:
        Mapping link-slug -> redirect target slug, or None if not redirected
    """
    verifier = RedirectVerifier(new_site, config=config, progress=progress, batch_size=concurrency)
    outcome = await verifier.verify(missing_links)
    return outcome.redirects
