"""测试行情序列规范化."""

import pytest
from pydantic import ValidationError

from signalscan.core.models import NormalizedSeries, RawQuoteSeries
from signalscan.core.services.normalizer import epoch_to_date, normalize_series, raw_from_series


def _raw(**overrides):
    values = {
        "timestamps": [1704067200, 1704153600, 1704240000, 1704326400],
        "opens": [10.0, 10.5, None, 11.0],
        "highs": [10.5, 11.0, 11.2, 11.5],
        "lows": [9.5, 10.0, 10.4, 10.8],
        "closes": [10.2, 10.8, 11.0, 11.3],
        "volumes": [100, 200, 300, None],
        "adj_closes": [10.1, 10.7, 10.9, 11.2],
    }
    values.update(overrides)
    return RawQuoteSeries(**values)


class TestEpochToDate:
    @pytest.mark.parametrize(
        ("timestamp", "expected"),
        [
            (0, "1970-01-01"),
            (1704067200, "2024-01-01"),
            (1709164800, "2024-02-29"),
            (1709251199, "2024-02-29"),
            (1709251200, "2024-03-01"),
            (1735689599, "2024-12-31"),
        ],
    )
    def test_utc_calendar_dates(self, timestamp, expected):
        assert epoch_to_date(timestamp) == expected


class TestNormalizeSeries:
    def test_nulls_become_zero_and_keep_position(self):
        series = normalize_series(_raw(), "AAPL")

        assert series.symbol == "AAPL"
        assert series.dates == ("2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04")
        assert series.opens[2] == 0.0
        assert series.volumes == (100, 200, 300, 0)
        assert len(series) == 4

    def test_adjusted_close_falls_back_to_close(self):
        series = normalize_series(_raw(adj_closes=None), "AAPL")

        assert series.adj_closes == series.closes

    def test_volumes_coerced_to_int(self):
        series = normalize_series(_raw(volumes=[100.0, 200.0, 300.0, 400.0]), "AAPL")

        assert all(isinstance(volume, int) for volume in series.volumes)

    def test_idempotent(self):
        first = normalize_series(_raw(), "AAPL")
        second = normalize_series(raw_from_series(first), "AAPL")

        assert second == first

    def test_series_is_frozen(self):
        series = normalize_series(_raw(), "AAPL")

        with pytest.raises(ValidationError):
            series.symbol = "MSFT"

    def test_empty(self):
        series = normalize_series(
            RawQuoteSeries(timestamps=[], opens=[], highs=[], lows=[], closes=[], volumes=[]),
            "AAPL",
        )

        assert len(series) == 0
        assert series.last_close == 0.0


class TestValidation:
    def test_raw_length_mismatch_rejected(self):
        with pytest.raises(ValidationError):
            _raw(closes=[1.0, 2.0])

    def test_raw_adjclose_length_mismatch_rejected(self):
        with pytest.raises(ValidationError):
            _raw(adj_closes=[1.0])

    def test_normalized_length_mismatch_rejected(self):
        with pytest.raises(ValidationError):
            NormalizedSeries(symbol="X", dates=("2024-01-01",), closes=(1.0, 2.0))
