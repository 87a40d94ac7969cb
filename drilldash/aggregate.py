"""
Aggregator: per-stand time series and cross-stand summaries.

Every ratio here returns 0 when its denominator is 0, so the dashboard
never has to guard against NaN or infinity.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Sequence

import numpy as np
import pandas as pd

from drilldash import config
from drilldash.models import Stand, TimeSeries

logger = logging.getLogger(__name__)

# Chart series key -> Stand attribute
SERIES_FIELDS = {
    "rop": "rop",
    "wob": "wob",
    "rpm": "rpm",
    "torque": "torque",
    "depth": "depth",
    "controlPercent": "control_drilling_percent",
    "connectionTime": "connection_time",
    "preConnectionTime": "pre_connection_time",
    "postConnectionTime": "post_connection_time",
    "preConnectionControl": "pre_connection_in_control",
    "preConnectionManual": "pre_connection_out_control",
    "postConnectionControl": "post_connection_in_control",
    "postConnectionManual": "post_connection_out_control",
    "ropMaxCounts": "ops_limit_rop_max_count",
    "wobMaxCounts": "ops_limit_wob_max_count",
    "torqueMaxCounts": "ops_limit_torque_max_count",
    "rpmMaxCounts": "ops_limit_rpm_max_count",
    "diffPMaxCounts": "ops_limit_diff_p_max_count",
}

CONNECTION_FIELDS = [
    "connection_time",
    "pre_connection_time",
    "post_connection_time",
    "pre_connection_in_control",
    "pre_connection_out_control",
    "post_connection_in_control",
    "post_connection_out_control",
]


def stand_label(stand_id: int) -> str:
    return config.STAND_LABEL.format(stand_id)


def build_series(stands: Sequence[Stand], attribute: str) -> TimeSeries:
    return TimeSeries(
        labels=[stand_label(s.id) for s in stands],
        data=[getattr(s, attribute) for s in stands],
    )


def build_time_series(stands: Sequence[Stand]) -> Dict[str, TimeSeries]:
    """One label/data series per chart parameter, aligned to the stand order."""
    return {key: build_series(stands, attribute) for key, attribute in SERIES_FIELDS.items()}


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean ignoring NaN; an empty input averages to 0."""
    series = pd.Series(list(values), dtype=float).dropna()
    if series.empty:
        return 0.0
    return float(series.mean())


def total(stands: Iterable[Stand], attribute: str) -> float:
    return sum(getattr(s, attribute) or 0 for s in stands)


def control_percent(in_control: float, out_control: float) -> float:
    """Share of a phase spent under automated control, in percent."""
    phase_total = in_control + out_control
    if phase_total == 0:
        return 0.0
    return in_control / phase_total * 100


def weighted_control_percent(stands: Sequence[Stand]) -> float:
    """Control drilling percentage weighted by the distance each stand drilled."""
    total_distance = total(stands, "distance_drilled")
    if total_distance == 0:
        return 0.0
    weighted = sum(s.control_drilling_percent * s.distance_drilled for s in stands)
    return weighted / total_distance


def connection_averages(stands: Sequence[Stand]) -> Dict[str, float]:
    return {name: mean(getattr(s, name) for s in stands) for name in CONNECTION_FIELDS}


def ops_limit_totals(stands: Sequence[Stand]) -> Dict[str, int]:
    return {
        name: int(sum(s.ops_limit_count(name) for s in stands))
        for name in config.OPS_LIMIT_COLUMNS
    }


def drilling_metrics(stands: Sequence[Stand]) -> Dict[str, float]:
    """Footage and control figures for the KPI header over a stand subset."""
    total_distance = total(stands, "distance_drilled")
    control = weighted_control_percent(stands)
    in_control_distance = total_distance * control / 100

    pre_total = total(stands, "pre_connection_time")
    post_total = total(stands, "post_connection_time")
    pre_in = total(stands, "pre_connection_in_control")
    post_in = total(stands, "post_connection_in_control")

    return {
        "total_distance_drilled": total_distance,
        "total_control_drilling_percent": control,
        "drill_in_control_distance": in_control_distance,
        "pre_connection_control_percent": pre_in / pre_total * 100 if pre_total else 0.0,
        "post_connection_control_percent": post_in / post_total * 100 if post_total else 0.0,
        "total_meters": total_distance * config.FEET_TO_METERS,
        "drill_in_control_meters": in_control_distance * config.FEET_TO_METERS,
    }


def multi_stand_summary(stands: Sequence[Stand]) -> Dict[str, float]:
    """Averages and totals for a hand-picked set of stands."""
    pre_in = total(stands, "pre_connection_in_control")
    pre_out = total(stands, "pre_connection_out_control")
    post_in = total(stands, "post_connection_in_control")
    post_out = total(stands, "post_connection_out_control")

    summary = {
        "stand_count": len(stands),
        "avg_rop": mean(s.rop for s in stands),
        "avg_wob": mean(s.wob for s in stands),
        "avg_rpm": mean(s.rpm for s in stands),
        "avg_torque": mean(s.torque for s in stands),
        "avg_control_percent": mean(s.control_drilling_percent for s in stands),
        "avg_pre_connection_time": mean(s.pre_connection_time for s in stands),
        "avg_post_connection_time": mean(s.post_connection_time for s in stands),
        "avg_total_connection_time": mean(s.connection_time for s in stands),
        "avg_pre_connection_control": control_percent(pre_in, pre_out),
        "avg_post_connection_control": control_percent(post_in, post_out),
        "avg_total_connection_control": control_percent(pre_in + post_in, pre_out + post_out),
        "total_distance": total(stands, "distance_drilled"),
    }
    for name, count in ops_limit_totals(stands).items():
        summary[f"total_{name}_limits"] = count
    return summary


def series_stats(data: Sequence[float]) -> Dict[str, float]:
    """Min, max and average for axis scaling; placeholder range when empty."""
    values = np.asarray(list(data), dtype=float)
    values = values[np.isfinite(values)]
    if values.size == 0:
        return {"min": 0.0, "max": 100.0, "avg": 50.0}
    return {
        "min": float(values.min()),
        "max": float(values.max()),
        "avg": float(values.mean()),
    }


def _interval_summary(stands: List[Stand]) -> Dict[str, float]:
    pre_in = total(stands, "pre_connection_in_control")
    pre_out = total(stands, "pre_connection_out_control")
    post_in = total(stands, "post_connection_in_control")
    post_out = total(stands, "post_connection_out_control")
    return {
        "stands_count": len(stands),
        "total_footage": total(stands, "distance_drilled"),
        "avg_control_percent": weighted_control_percent(stands),
        "pre_conn_control_percent": control_percent(pre_in, pre_out),
        "post_conn_control_percent": control_percent(post_in, post_out),
        "total_pre_conn_control": pre_in,
        "total_pre_conn_manual": pre_out,
        "total_post_conn_control": post_in,
        "total_post_conn_manual": post_out,
        "ops_limits": ops_limit_totals(stands),
    }


def time_breakdown(stands: Sequence[Stand], day: date, hours: int = 24) -> Dict[str, object]:
    """Split one calendar day into equal intervals and summarize each.

    Stands are placed by their start time; stands without one are left out.
    """
    if hours not in config.BREAKDOWN_HOURS:
        raise ValueError(f"hours must be one of {config.BREAKDOWN_HOURS}, got {hours}")

    day_start = datetime.combine(day, time.min)
    day_end = day_start + timedelta(days=1)
    day_stands = [s for s in stands if s.start_time and day_start <= s.start_time < day_end]

    intervals = []
    for i in range(24 // hours):
        start = day_start + timedelta(hours=i * hours)
        end = start + timedelta(hours=hours)
        in_interval = [s for s in day_stands if start <= s.start_time < end]
        interval = {
            "label": f"{start:%H:%M}-{end:%H:%M}" if hours < 24 else f"{day:%Y-%m-%d}",
            "start": start,
            "end": end,
        }
        interval.update(_interval_summary(in_interval))
        intervals.append(interval)

    logger.debug("Time breakdown for %s: %d stands in %d intervals", day, len(day_stands), len(intervals))
    result = _interval_summary(day_stands)
    result["intervals"] = intervals
    return result
