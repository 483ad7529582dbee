"""
Prometheus metrics for monitoring the scrape pipeline.

Defines and exposes metrics for:
- Releases added / updated
- Reviews added and records skipped
- Scraper errors
- Scraper run latency and fetch latency

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    start_http_server,
)

from release_timeline.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
RUN_LATENCY_BUCKETS = (1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0, 1800.0)
FETCH_LATENCY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class MetricsCollector:
    """
    Prometheus metrics collector for the release-timeline scrapers.

    Usage:
        metrics = get_metrics()
        metrics.record_run("reddit", added=3, updated=0, skipped=1, errors=0, latency=12.5)
    """

    def __init__(self):
        """Initialize Prometheus metrics."""

        self.releases_added = Counter(
            "release_timeline_releases_added_total",
            "Total number of releases created",
            ["scraper"],
        )

        self.releases_updated = Counter(
            "release_timeline_releases_updated_total",
            "Total number of existing releases updated",
            ["scraper"],
        )

        self.reviews_added = Counter(
            "release_timeline_reviews_added_total",
            "Total number of reviews created",
            ["scraper"],
        )

        self.records_skipped = Counter(
            "release_timeline_records_skipped_total",
            "Records skipped for missing fields or existing rows",
            ["scraper"],
        )

        self.scrape_errors = Counter(
            "release_timeline_scrape_errors_total",
            "Errors collected during scraper runs",
            ["scraper"],
        )

        self.run_latency = Histogram(
            "release_timeline_scraper_run_seconds",
            "Wall time of a single scraper run",
            ["scraper"],
            buckets=RUN_LATENCY_BUCKETS,
        )

        self.fetch_latency = Histogram(
            "release_timeline_fetch_latency_seconds",
            "Time to fetch a single external URL",
            ["outcome"],  # ok, not_ok, error
            buckets=FETCH_LATENCY_BUCKETS,
        )

        logger.info("Prometheus metrics initialized")

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info(f"Prometheus metrics server started on port {port}")

    def record_run(
        self,
        scraper: str,
        added: int,
        updated: int,
        skipped: int,
        errors: int,
        latency: float | None = None,
        reviews: bool = False,
    ) -> None:
        """
        Record the counters of one finished scraper run.

        Args:
            scraper: Scraper name
            added: Rows created
            updated: Rows updated
            skipped: Records skipped
            errors: Errors collected
            latency: Optional run latency in seconds
            reviews: Whether the created rows are reviews (else releases)
        """
        if reviews:
            self.reviews_added.labels(scraper=scraper).inc(added)
        else:
            self.releases_added.labels(scraper=scraper).inc(added)
        self.releases_updated.labels(scraper=scraper).inc(updated)
        self.records_skipped.labels(scraper=scraper).inc(skipped)
        self.scrape_errors.labels(scraper=scraper).inc(errors)

        if latency is not None:
            self.run_latency.labels(scraper=scraper).observe(latency)

    def record_fetch(self, outcome: str, latency: float) -> None:
        """
        Record fetch latency.

        Args:
            outcome: ok, not_ok or error
            latency: Latency in seconds
        """
        self.fetch_latency.labels(outcome=outcome).observe(latency)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
