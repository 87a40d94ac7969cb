"""
Well/chart adapter: reshapes stands and aggregates into the structures the
dashboard page renders. Besides stand selection and time-range filtering,
nothing here computes new values.
"""

import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from drilldash import aggregate, config
from drilldash.models import (
    CurrentParams,
    DashboardData,
    NormalizedData,
    Stand,
    TimeSeries,
    WellInfo,
)

logger = logging.getLogger(__name__)

LABEL_PATTERN = re.compile(r"Stand (-?\d+)")

STAND_TABLE_COLUMNS = [
    "Stand", "Type", "Start Time", "Start Depth (ft)", "End Depth (ft)", "Distance (ft)",
    "ROP (ft/hr)", "WOB (klbs)", "RPM", "Torque", "Control %", "Connection (s)",
    "Indicators", "Active",
]


def current_params(stand: Optional[Stand]) -> CurrentParams:
    if stand is None:
        return CurrentParams()
    return CurrentParams(
        wob=stand.wob,
        rop=stand.rop,
        rpm=stand.rpm,
        torque=stand.torque,
        flow_rate=stand.flow_rate,
        depth=stand.depth,
        rotary_duration=stand.rotary_duration,
        slide_duration=stand.slide_duration,
        connection_time=stand.connection_time,
        pre_connection_time=stand.pre_connection_time,
        post_connection_time=stand.post_connection_time,
        pre_connection_in_control=stand.pre_connection_in_control,
        pre_connection_out_control=stand.pre_connection_out_control,
        post_connection_in_control=stand.post_connection_in_control,
        post_connection_out_control=stand.post_connection_out_control,
        control_drilling_percent=stand.control_drilling_percent,
    )


def well_info(well_id: str, stands: Sequence[Stand]) -> WellInfo:
    last = stands[-1] if stands else None
    return WellInfo(
        well_id=well_id,
        total_stands=len(stands),
        total_depth=last.depth if last else 0.0,
        current_stand=last.id if last else None,
    )


def connection_kpis(stands: Sequence[Stand]) -> Dict[str, float]:
    return aggregate.connection_averages(stands)


def active_stand(stands: Sequence[Stand]) -> Optional[Stand]:
    return next((s for s in stands if s.is_active), None)


def select_stand(stands: Sequence[Stand], stand_id: int) -> List[Stand]:
    """Return a new stand list in which only ``stand_id`` is active."""
    if not any(s.id == stand_id for s in stands):
        raise KeyError(f"no stand with id {stand_id}")
    return [s.with_active(s.id == stand_id) for s in stands]


def time_range_for_preset(
    preset: str,
    stands: Sequence[Stand],
    now: Optional[datetime] = None,
) -> Tuple[date, date]:
    """Start and end dates for a time preset ("12h", "24h", "7d" or "all")."""
    now = now or datetime.now(timezone.utc).replace(tzinfo=None)
    if preset in config.TIME_PRESET_HOURS:
        start = now - timedelta(hours=config.TIME_PRESET_HOURS[preset])
        return start.date(), now.date()
    if preset != "all":
        raise ValueError(f"unknown time preset: {preset}")

    start_times = [s.start_time for s in stands if s.start_time]
    if start_times:
        return min(start_times).date(), now.date()
    return (now - timedelta(days=config.FALLBACK_RANGE_DAYS)).date(), now.date()


def filter_series(series: TimeSeries, stand_ids: set) -> TimeSeries:
    filtered = TimeSeries()
    for label, value in zip(series.labels, series.data):
        match = LABEL_PATTERN.match(label)
        if match and int(match.group(1)) in stand_ids:
            filtered.labels.append(label)
            filtered.data.append(value)
    return filtered


def filter_by_time_range(
    stands: Sequence[Stand],
    chart_data: Dict[str, TimeSeries],
    start: Optional[date],
    end: Optional[date],
) -> Tuple[List[Stand], Dict[str, TimeSeries]]:
    """Keep stands started within [start, end] (end inclusive to end of day).

    Stands without a start time are always kept. Every chart series is
    reduced to the labels of the kept stands.
    """
    start_dt = datetime.combine(start, time.min) if start else datetime.min
    end_dt = datetime.combine(end, time.max) if end else datetime.max

    kept = [
        s for s in stands
        if s.start_time is None or start_dt <= s.start_time <= end_dt
    ]
    kept_ids = {s.id for s in kept}
    filtered = {key: filter_series(series, kept_ids) for key, series in chart_data.items()}
    return kept, filtered


def stand_indicators(stand: Stand) -> List[str]:
    """Short performance badges shown next to a stand in the history list."""
    indicators = []
    if stand.rop > config.HIGH_ROP:
        indicators.append("High ROP")
    if stand.wob > config.HIGH_WOB:
        indicators.append("High WOB")
    if 0 < stand.rop < config.LOW_ROP:
        indicators.append("Low ROP")
    if stand.distance_drilled > config.LONG_SECTION_FT:
        indicators.append("Long Section")
    if stand.control_drilling_percent >= config.HIGH_CONTROL_PERCENT:
        indicators.append("High Control %")
    if 0 < stand.control_drilling_percent < config.LOW_CONTROL_PERCENT:
        indicators.append("Low Control %")
    return indicators


def stands_frame(stands: Sequence[Stand]) -> pd.DataFrame:
    """Stand table for display, one row per stand in id order."""
    rows = [
        {
            "Stand": s.id,
            "Type": s.stand_type,
            "Start Time": s.time_range,
            "Start Depth (ft)": s.start_depth,
            "End Depth (ft)": s.end_depth,
            "Distance (ft)": s.distance_drilled,
            "ROP (ft/hr)": s.rop,
            "WOB (klbs)": s.wob,
            "RPM": s.rpm,
            "Torque": s.torque,
            "Control %": s.control_drilling_percent,
            "Connection (s)": s.connection_time,
            "Indicators": ", ".join(stand_indicators(s)),
            "Active": s.is_active,
        }
        for s in stands
    ]
    return pd.DataFrame(rows, columns=STAND_TABLE_COLUMNS)


def build_dashboard(normalized: NormalizedData) -> DashboardData:
    stands = normalized.stands
    return DashboardData(
        well_id=normalized.well_id,
        stands=stands,
        chart_data=aggregate.build_time_series(stands),
        current_params=current_params(active_stand(stands)),
        well_info=well_info(normalized.well_id, stands),
        connection_kpis=connection_kpis(stands),
        ops_limits=aggregate.ops_limit_totals(stands),
        drilling_metrics=aggregate.drilling_metrics(stands),
    )
