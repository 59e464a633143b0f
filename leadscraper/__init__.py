"""Business listing scraper with website email enrichment."""

from .pipeline import Pipeline, RunSummary
from .targets import build_tasks

__all__ = ["Pipeline", "RunSummary", "build_tasks"]
