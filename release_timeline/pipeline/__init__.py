"""Scrape pipeline: scrapers that turn external feeds into releases and reviews."""

from release_timeline.pipeline.base import BaseScraper, ScrapeOptions
from release_timeline.pipeline.blogs import BlogReviewScraper
from release_timeline.pipeline.catalog import CatalogScraper
from release_timeline.pipeline.official import OfficialReleaseScraper, OfficialReviewScraper
from release_timeline.pipeline.reddit import RedditReviewScraper
from release_timeline.pipeline.result import ScrapeResult
from release_timeline.pipeline.runner import SCRAPERS, ScrapePipeline, resolve_scrapers
from release_timeline.pipeline.x import XReviewScraper

__all__ = [
    "BaseScraper",
    "BlogReviewScraper",
    "CatalogScraper",
    "OfficialReleaseScraper",
    "OfficialReviewScraper",
    "RedditReviewScraper",
    "SCRAPERS",
    "ScrapeOptions",
    "ScrapePipeline",
    "ScrapeResult",
    "XReviewScraper",
    "resolve_scrapers",
]
