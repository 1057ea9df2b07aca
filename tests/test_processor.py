from datetime import timedelta
from functools import partial
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import make_position
from pitwall_lights.core.errors import DriverNotFound, MissingCredential, NoPositionData
from pitwall_lights.data.models import ReconcilePolicy, RunOutcome
from pitwall_lights.data.processor import PositionLightsJob
from pitwall_lights.lights.govee import GoveeClient


class TestPositionLightsJob:
    @pytest.fixture
    def feed(self, sample_positions, sample_drivers):
        feed = MagicMock()
        feed.session_key = "latest"
        feed.get_positions.return_value = sample_positions
        feed.get_drivers.return_value = sample_drivers
        return feed

    @pytest.fixture
    def lights(self):
        client = MagicMock()
        client.set_segment_color = AsyncMock(return_value={"code": 200})
        return client

    @pytest.fixture
    def make_job(self, feed, lights, race_time):
        def factory(minutes_later=10, **kwargs):
            options = dict(
                feed=feed,
                lights_factory=MagicMock(return_value=lights),
                policy=ReconcilePolicy.GROUP_BY_COLOUR,
                threshold_minutes=120,
                pacing_seconds=0.5,
                clock=lambda: race_time + timedelta(minutes=minutes_later),
                sleep=AsyncMock(),
            )
            options.update(kwargs)
            return PositionLightsJob(**options)

        return factory

    async def test_fresh_run_updates_lights(self, make_job, feed, lights):
        job = make_job()

        result = await job.run()

        assert result.outcome == RunOutcome.COMPLETED
        feed.get_drivers.assert_called_once()
        assert lights.set_segment_color.await_count == 3
        assert [a.color for a in result.assignments] == ["#3671C6", "#FF8000", "#6692FF"]
        assert job.sleep.await_count == 2
        assert job.runs_completed == 1

    async def test_per_driver_policy(self, make_job, lights):
        job = make_job(policy=ReconcilePolicy.PER_DRIVER)

        result = await job.run()

        assert len(result.assignments) == 4
        calls = [c.args[0] for c in lights.set_segment_color.await_args_list]
        assert calls == [[6], [7], [8], [9]]

    async def test_stale_data_skips_everything(self, make_job, feed, race_time):
        # Latest record is at +5 minutes
        job = make_job(minutes_later=5 + 121)

        with patch("pitwall_lights.data.processor.logger") as mock_logger:
            result = await job.run()

        assert result.outcome == RunOutcome.SKIPPED_STALE
        assert result.latest_position_at == race_time + timedelta(minutes=5)
        feed.get_drivers.assert_not_called()
        job.lights_factory.assert_not_called()
        assert "skipping update" in mock_logger.warning.call_args[0][0]

    async def test_just_inside_threshold(self, make_job):
        job = make_job(minutes_later=5 + 119)

        result = await job.run()

        assert result.outcome == RunOutcome.COMPLETED

    async def test_empty_feed(self, make_job, feed):
        feed.get_positions.return_value = []
        job = make_job()

        with pytest.raises(NoPositionData):
            await job.run()

        feed.get_drivers.assert_not_called()
        job.lights_factory.assert_not_called()

    async def test_missing_driver_fails_before_actuation(
        self, make_job, feed, lights, sample_positions
    ):
        feed.get_positions.return_value = sample_positions + [
            make_position(99, 5, minutes=5)
        ]
        job = make_job()

        with patch("pitwall_lights.data.processor.logger") as mock_logger:
            with pytest.raises(DriverNotFound):
                await job.run()

        lights.set_segment_color.assert_not_called()
        assert "DriverNotFound" in mock_logger.error.call_args[0][0]

    async def test_missing_credential_before_any_write(self, make_job):
        job = make_job(
            lights_factory=partial(GoveeClient, api_key=None, device_id="AA:BB")
        )

        with patch("aiohttp.ClientSession.post") as mock_post:
            with pytest.raises(MissingCredential):
                await job.run()

        mock_post.assert_not_called()

    async def test_overlapping_run_is_skipped(self, make_job, feed):
        job = make_job()
        job.guard.try_acquire()

        result = await job.run()

        assert result.outcome == RunOutcome.SKIPPED_BUSY
        feed.get_positions.assert_not_called()

    async def test_guard_released_after_failure(self, make_job, feed):
        feed.get_positions.return_value = []
        job = make_job()

        with pytest.raises(NoPositionData):
            await job.run()

        assert not job.guard.running
