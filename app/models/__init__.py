"""Data models for the Link Parity Checker."""

from .progress import ProgressTracker, ProgressEvent
from .comparison import ComparisonResult, PageDiff, Redirect

__all__ = ['ProgressTracker', 'ProgressEvent', 'ComparisonResult', 'PageDiff', 'Redirect']
