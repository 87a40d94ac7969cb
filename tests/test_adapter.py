"""Tests for stand selection, time filtering and dashboard assembly."""

from datetime import date, datetime

import pytest

from conftest import make_stand
from drilldash.adapter import (
    STAND_TABLE_COLUMNS,
    active_stand,
    build_dashboard,
    current_params,
    filter_by_time_range,
    select_stand,
    stand_indicators,
    stands_frame,
    time_range_for_preset,
    well_info,
)
from drilldash.aggregate import build_time_series
from drilldash.normalize import normalize_records

NOW = datetime(2024, 3, 10, 8, 30)


@pytest.fixture
def normalized(drilling_rows):
    return normalize_records(drilling_rows)


@pytest.fixture
def stands(normalized):
    return normalized.stands


class TestSelectStand:
    def test_exactly_one_active(self, stands):
        selected = select_stand(stands, 1)
        assert [s.is_active for s in selected] == [True, False, False]

    def test_input_list_untouched(self, stands):
        select_stand(stands, 1)
        assert active_stand(stands).id == 3

    def test_unknown_stand(self, stands):
        with pytest.raises(KeyError):
            select_stand(stands, 42)


class TestTimePresets:
    @pytest.mark.parametrize("preset,start", [
        ("12h", date(2024, 3, 9)),
        ("24h", date(2024, 3, 9)),
        ("7d", date(2024, 3, 3)),
    ])
    def test_relative_presets(self, stands, preset, start):
        assert time_range_for_preset(preset, stands, now=NOW) == (start, date(2024, 3, 10))

    def test_all_starts_at_earliest_stand(self, stands):
        assert time_range_for_preset("all", stands, now=NOW) == (date(2024, 3, 1), date(2024, 3, 10))

    def test_all_without_timestamps_falls_back(self):
        assert time_range_for_preset("all", [make_stand()], now=NOW) == (date(2024, 2, 9), date(2024, 3, 10))

    def test_unknown_preset(self, stands):
        with pytest.raises(ValueError):
            time_range_for_preset("3w", stands, now=NOW)


class TestTimeFilter:
    def test_filters_stands_and_series_together(self, stands):
        chart_data = build_time_series(stands)
        kept, filtered = filter_by_time_range(stands, chart_data, date(2024, 3, 2), date(2024, 3, 2))
        assert [s.id for s in kept] == [3]
        assert filtered["rop"].labels == ["Stand 3"]
        assert filtered["rop"].data == [140]
        assert all(len(series) == 1 for series in filtered.values())

    def test_end_date_is_inclusive(self, stands):
        chart_data = build_time_series(stands)
        kept, _ = filter_by_time_range(stands, chart_data, date(2024, 3, 1), date(2024, 3, 1))
        assert [s.id for s in kept] == [1, 2]

    def test_open_range_keeps_everything(self, stands):
        chart_data = build_time_series(stands)
        kept, filtered = filter_by_time_range(stands, chart_data, None, None)
        assert kept == stands
        assert filtered["depth"].data == chart_data["depth"].data

    def test_stands_without_start_time_are_kept(self):
        stands = [make_stand(), make_stand(StandIndex="2", StartTimeUTC="2020-01-01T00:00:00Z")]
        kept, _ = filter_by_time_range(stands, build_time_series(stands), date(2024, 1, 1), None)
        assert [s.id for s in kept] == [1]


class TestIndicators:
    def test_fast_heavy_stand(self, stands):
        assert stand_indicators(stands[2]) == ["High ROP", "High WOB"]

    def test_slow_stand(self, stands):
        assert stand_indicators(stands[1]) == ["Low ROP"]

    def test_long_section_and_control(self):
        stand = make_stand(**{
            "EndDepth(ft)": "6600",
            "OnBottomRop(ft/h)": "60",
            "DrillingDurationInControl(s)": "900",
            "DrillingDurationOutControl(s)": "100",
        })
        assert stand_indicators(stand) == ["Long Section", "High Control %"]


class TestDashboard:
    def test_well_info(self, stands):
        info = well_info("Well-7", stands)
        assert info.total_stands == 3
        assert info.total_depth == 6650
        assert info.current_stand == 3

    def test_well_info_without_stands(self):
        info = well_info("Unknown Well", [])
        assert info.total_stands == 0
        assert info.current_stand is None

    def test_current_params_without_active_stand(self):
        params = current_params(None)
        assert params.rop == 0
        assert params.control_drilling_percent == 0

    def test_build_dashboard(self, normalized):
        dashboard = build_dashboard(normalized)
        assert dashboard.well_id == "Well-7"
        assert dashboard.current_params.rop == 140
        assert dashboard.current_params.depth == 6650
        assert dashboard.connection_kpis["connection_time"] == pytest.approx(300)
        assert dashboard.ops_limits["wob"] == 4
        assert dashboard.drilling_metrics["total_control_drilling_percent"] == pytest.approx(55.0)
        assert dashboard.chart_data["rop"].labels == ["Stand 1", "Stand 2", "Stand 3"]

    def test_stands_frame(self, stands):
        frame = stands_frame(stands)
        assert list(frame.columns) == STAND_TABLE_COLUMNS
        assert frame["Stand"].tolist() == [1, 2, 3]
        assert frame["Active"].tolist() == [False, False, True]
        assert frame.loc[1, "Indicators"] == "Low ROP"

    def test_empty_stands_frame(self):
        frame = stands_frame([])
        assert frame.empty
        assert list(frame.columns) == STAND_TABLE_COLUMNS
