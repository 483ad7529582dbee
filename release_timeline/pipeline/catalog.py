"""
Release ingestion from the notable-models catalog CSV.

Each CSV row describes one model. Rows from tracked organizations in a
relevant domain become releases; a row that matches an existing release
(same name, or same company and date) only refreshes its auxiliary fields.
"""

import csv
from urllib.parse import quote_plus

import structlog

from release_timeline.ingestion.heuristics import (
    categorize_release,
    format_parameters,
    is_allowed_catalog_company,
    is_coding_related,
    is_relevant_domain,
    normalize_company,
    parse_release_date,
)
from release_timeline.ingestion.http_client import FetchError
from release_timeline.ingestion.parsers import parse_csv
from release_timeline.ingestion.schemas import SourceType
from release_timeline.pipeline.base import BaseScraper
from release_timeline.pipeline.result import ScrapeResult
from release_timeline.storage.schemas import Release

logger = structlog.get_logger(__name__)

SEARCH_URL = "https://google.com/search?q="

# Catalog column names
COL_MODEL = "Model"
COL_ORGANIZATION = "Organization"
COL_PUBLICATION_DATE = "Publication date"
COL_DOMAIN = "Domain"
COL_TASK = "Task"
COL_PARAMETERS = "Parameters"
COL_LINK = "Link"
COL_ABSTRACT = "Abstract"


def is_relevant_record(record: dict[str, str]) -> bool:
    """Whether a catalog row comes from a tracked organization and domain."""
    return is_allowed_catalog_company(
        record.get(COL_ORGANIZATION, "")
    ) and is_relevant_domain(record.get(COL_DOMAIN, ""))


class CatalogScraper(BaseScraper):
    """Creates and refreshes releases from every enabled csv source."""

    name = "catalog"
    writes_reviews = False

    async def _catalog_urls(self) -> list[str]:
        sources = await self.store.find_enabled_sources([SourceType.CSV])
        if sources:
            return [source.url for source in sources]
        logger.info(
            "No csv sources configured, using default catalog",
            url=self.settings.catalog_csv_url,
        )
        return [self.settings.catalog_csv_url]

    async def _scrape(self, result: ScrapeResult) -> None:
        for url in await self._catalog_urls():
            try:
                await self.pacer.wait()
                text = await self.fetcher.get_text(url)
            except FetchError as e:
                self._record_error(result, f"Error fetching catalog {url}: {e}")
                continue

            if text is None:
                self._record_error(result, f"Failed to fetch catalog {url}: non-OK status")
                continue

            try:
                records = parse_csv(text)
            except csv.Error as e:
                self._record_error(result, f"Error parsing catalog {url}: {e}")
                continue

            relevant = [r for r in records if is_relevant_record(r)]
            logger.info(
                "Catalog parsed",
                url=url,
                records=len(records),
                relevant=len(relevant),
            )

            for record in relevant:
                try:
                    await self._ingest_record(record, result)
                except Exception as e:
                    self._record_error(
                        result,
                        f"Error processing model {record.get(COL_MODEL, '')}: {e}",
                    )

    async def _ingest_record(self, record: dict[str, str], result: ScrapeResult) -> None:
        name = record.get(COL_MODEL, "").strip()
        release_date = parse_release_date(record.get(COL_PUBLICATION_DATE))
        if not name or release_date is None:
            result.skipped += 1
            logger.debug("Skipping catalog row without name or date", model=name)
            return

        organization = record.get(COL_ORGANIZATION, "")
        domain = record.get(COL_DOMAIN, "")
        task = record.get(COL_TASK, "")
        link = record.get(COL_LINK, "")
        abstract = record.get(COL_ABSTRACT, "")

        company = normalize_company(organization)
        coding = is_coding_related(f"{task} {name} {abstract}")
        parameters = format_parameters(record.get(COL_PARAMETERS))

        existing = await self.store.find_one_release(name, company, release_date)
        if existing is not None:
            await self.store.update_release(
                existing.id,
                is_coding_related=coding,
                domain=domain or None,
                parameters=parameters,
            )
            result.updated += 1
            return

        summary_limit = self.settings.release_summary_max_chars
        await self.store.create_release(
            Release(
                name=name,
                company=company,
                category=categorize_release(f"{domain} {task} {name}"),
                release_date=release_date,
                summary=abstract[:summary_limit] or f"{name} by {company}",
                docs_url=link or SEARCH_URL + quote_plus(f"{name} {company}"),
                source_url=link or self.settings.catalog_page_url,
                is_coding_related=coding,
                domain=domain or None,
                parameters=parameters,
            )
        )
        result.added += 1
