"""Application configuration and constants."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ComparisonConfig:
    """Configuration for a single comparison run."""
    probe_timeout: float = 5.0  # seconds per redirect probe
    batch_size: int = 10  # concurrent probes per batch
    max_redirects: int = 10
    progress_every: int = 100  # report every N completed probes
    settle_delay: float = 0.1  # pause after the final progress event
    default_scheme: str = "https"
    drop_fragment_pages: bool = True  # old sitemap only
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"


@dataclass(frozen=True)
class ProgressMilestones:
    """Fixed progress fractions of a comparison run."""
    start: float = 0.0
    normalize_old: float = 0.05
    normalize_new: float = 0.10
    indexing: float = 0.15
    missing: float = 0.20
    extra: float = 0.23
    verify_start: float = 0.25
    verify_end: float = 0.85
    reconcile: float = 0.90
    done: float = 1.0

    def verification(self, checked: int, total: int) -> float:
        """Map verified probe count onto the verification window."""
        if total <= 0:
            return self.verify_end
        span = self.verify_end - self.verify_start
        return self.verify_start + span * (checked / total)


@dataclass(frozen=True)
class AppConfig:
    """Application-wide configuration."""
    # Redirect verification
    verify_redirects: bool = True
    min_concurrency: int = 1
    max_concurrency: int = 100


# Default configuration instances
DEFAULT_COMPARISON_CONFIG = ComparisonConfig()
DEFAULT_MILESTONES = ProgressMilestones()
DEFAULT_APP_CONFIG = AppConfig()
