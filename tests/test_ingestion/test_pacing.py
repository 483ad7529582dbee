"""Tests for the minimum-interval Pacer."""

from unittest.mock import AsyncMock, patch

import pytest

from release_timeline.ingestion.pacing import Pacer


class TestPacer:
    """Tests for Pacer.wait."""

    @pytest.mark.asyncio
    async def test_first_call_does_not_sleep(self):
        pacer = Pacer(min_interval=5.0)

        with patch("release_timeline.ingestion.pacing.asyncio.sleep", new=AsyncMock()) as sleep:
            slept = await pacer.wait()

        assert slept == 0.0
        sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_second_call_sleeps_remaining_interval(self):
        """Should sleep only for the part of the interval not yet elapsed."""
        clock = iter([100.0, 100.5, 102.5])
        pacer = Pacer(min_interval=2.0, clock=lambda: next(clock))

        with patch("release_timeline.ingestion.pacing.asyncio.sleep", new=AsyncMock()) as sleep:
            await pacer.wait()
            slept = await pacer.wait()

        assert slept == pytest.approx(1.5)
        sleep.assert_awaited_once()
        assert sleep.await_args[0][0] == pytest.approx(1.5)

    @pytest.mark.asyncio
    async def test_no_sleep_when_interval_already_elapsed(self):
        clock = iter([10.0, 12.0, 12.0])
        pacer = Pacer(min_interval=1.0, clock=lambda: next(clock))

        with patch("release_timeline.ingestion.pacing.asyncio.sleep", new=AsyncMock()) as sleep:
            await pacer.wait()
            slept = await pacer.wait()

        assert slept == 0.0
        sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_zero_interval_never_sleeps(self):
        pacer = Pacer(min_interval=0.0)

        with patch("release_timeline.ingestion.pacing.asyncio.sleep", new=AsyncMock()) as sleep:
            for _ in range(3):
                await pacer.wait()

        sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_reset_makes_next_call_immediate(self):
        pacer = Pacer(min_interval=10.0)

        with patch("release_timeline.ingestion.pacing.asyncio.sleep", new=AsyncMock()) as sleep:
            await pacer.wait()
            pacer.reset()
            await pacer.wait()

        sleep.assert_not_called()
