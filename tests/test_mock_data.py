# ABOUTME: Tests for the mock forecast payload and mock snapshots.
# ABOUTME: Ensures fallback data passes the same validation and normalization as real responses.

from datetime import date

from src.mock_data import build_mock_payload, mock_snapshot
from src.models import ForecastPayload


class TestMockData:
    def test_payload_validates(self):
        """The mock payload is a valid Open-Meteo forecast response.

        Implementation: Validates the payload with ForecastPayload.
        Passing implies: Mock data exercises the real parser.
        """
        payload = ForecastPayload.model_validate(build_mock_payload(date(2025, 6, 1)))
        assert len(payload.daily.time) == 16
        assert len(payload.hourly.time) == 16 * 24
        assert payload.hourly.time[0] == "2025-06-01T00:00"

    def test_snapshot_is_flagged_and_dated_from_clock(self, fixed_clock):
        """mock_snapshot builds a flagged snapshot starting at the clock's hour.

        Implementation: Uses the fixed clock at 02:30 UTC.
        Passing implies: Mock data looks current and is distinguishable from real data.
        """
        snap = mock_snapshot("测试", clock=fixed_clock)

        assert snap.is_mock is True
        assert snap.location == "测试"
        assert snap.condition == "晴朗"
        assert snap.hourly[0].time == "02:00"
        assert len(snap.daily) == 15
        assert snap.daily[0].day == "今天"
        assert (snap.sunrise, snap.sunset) == ("06:12", "18:04")

    def test_snapshot_is_deterministic(self, fixed_clock):
        """Two mock snapshots for the same clock are identical.

        Implementation: Compares JSON dumps of two calls.
        Passing implies: Mock data is stable for tests and demos.
        """
        first = mock_snapshot("a", clock=fixed_clock)
        second = mock_snapshot("a", clock=fixed_clock)
        assert first.model_dump_json() == second.model_dump_json()
