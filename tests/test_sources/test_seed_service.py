"""Tests for seed loading and SourcesService."""

import json
from unittest.mock import AsyncMock

import pytest

from release_timeline.ingestion.schemas import SourceType
from release_timeline.sources.config import SourcesConfig
from release_timeline.sources.service import SourcesService, load_seed_sources


class TestLoadSeedSources:
    def test_default_seed_file(self) -> None:
        sources = load_seed_sources()

        assert len(sources) == 16
        by_type = {t: [s for s in sources if s.type == t] for t in SourceType}
        assert len(by_type[SourceType.CSV]) == 1
        assert len(by_type[SourceType.REDDIT]) == 5
        assert all(s.company is None for s in by_type[SourceType.REDDIT])
        assert len({(s.type, s.url) for s in sources}) == len(sources)

    def test_custom_file(self, tmp_path) -> None:
        path = tmp_path / "seed.json"
        path.write_text(
            json.dumps(
                [{"type": "rss", "name": "Lab", "url": "https://lab.test/rss", "company": "Lab"}]
            )
        )

        sources = load_seed_sources(path)

        assert len(sources) == 1
        assert sources[0].enabled is True
        assert sources[0].company == "Lab"

    def test_missing_field_raises(self, tmp_path) -> None:
        path = tmp_path / "seed.json"
        path.write_text(json.dumps([{"type": "rss", "name": "No URL"}]))

        with pytest.raises(KeyError):
            load_seed_sources(path)

    def test_unknown_type_raises(self, tmp_path) -> None:
        path = tmp_path / "seed.json"
        path.write_text(json.dumps([{"type": "podcast", "name": "P", "url": "https://p"}]))

        with pytest.raises(ValueError):
            load_seed_sources(path)


class TestSourcesService:
    @pytest.mark.asyncio
    async def test_seed_from_json_upserts_all(self, mock_database: AsyncMock) -> None:
        service = SourcesService(mock_database, SourcesConfig(seed_on_init=True))

        count = await service.seed_from_json()

        assert count == 16
        mock_database.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_ensure_seeded_skips_populated_table(self, mock_database: AsyncMock) -> None:
        mock_database.fetchval.return_value = 3
        service = SourcesService(mock_database, SourcesConfig(seed_on_init=True))

        assert await service.ensure_seeded() == 0
        mock_database.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_ensure_seeded_empty_table(self, mock_database: AsyncMock) -> None:
        mock_database.fetchval.return_value = 0
        service = SourcesService(mock_database, SourcesConfig(seed_on_init=True))

        assert await service.ensure_seeded() == 16

    @pytest.mark.asyncio
    async def test_ensure_seeded_disabled(self, mock_database: AsyncMock) -> None:
        service = SourcesService(mock_database, SourcesConfig(seed_on_init=False))

        assert await service.ensure_seeded() == 0
        mock_database.fetchval.assert_not_called()
