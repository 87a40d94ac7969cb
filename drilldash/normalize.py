"""
Record normalizer: filters raw records and builds the sorted stand sequence.

Rows missing any mandatory field are dropped without surfacing an error,
since partial rows are common in field exports. Numeric cells that are
absent or unparseable become 0.
"""

import logging
import math
from datetime import datetime
from typing import Any, List, Optional

import pandas as pd

from drilldash import config
from drilldash.aggregate import control_percent
from drilldash.errors import NoValidDataError
from drilldash.models import NormalizedData, Stand
from drilldash.parser import Record

logger = logging.getLogger(__name__)


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float):
        return math.isnan(value)
    return False


def to_number(value: Any) -> float:
    """Coerce a cell to float; anything unreadable or non-finite is 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def to_int(value: Any) -> int:
    return int(to_number(value))


def parse_stand_index(value: Any) -> Optional[int]:
    """Return the stand index as an int, or None when it cannot be read."""
    if is_empty(value) or isinstance(value, bool):
        return None
    try:
        number = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a UTC timestamp cell into a naive UTC datetime."""
    if is_empty(value) or not isinstance(value, (str, datetime)):
        return None
    ts = pd.to_datetime(value, errors="coerce", utc=True)
    if pd.isna(ts):
        return None
    return ts.tz_convert(None).to_pydatetime()


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def is_valid_record(record: Record) -> bool:
    if any(is_empty(record.get(column)) for column in config.MANDATORY_COLUMNS):
        return False
    return parse_stand_index(record.get(config.COL_STAND_INDEX)) is not None


def resolve_well_id(records: List[Record]) -> str:
    """Well id of the first record, or the placeholder when it has none."""
    if not records or is_empty(records[0].get(config.COL_WELL_ID)):
        return config.DEFAULT_WELL_ID
    well_id = records[0][config.COL_WELL_ID]
    # Workbooks hand back numeric ids as floats
    if isinstance(well_id, float) and well_id.is_integer():
        well_id = int(well_id)
    return str(well_id).strip()


def build_stand(record: Record) -> Stand:
    """Build a Stand from a record that passed is_valid_record."""
    def number(column):
        return to_number(record.get(column))

    start_depth = number(config.COL_START_DEPTH)
    end_depth = number(config.COL_END_DEPTH)

    pre_in = number(config.COL_PRE_CONN_IN_CONTROL)
    pre_out = number(config.COL_PRE_CONN_OUT_CONTROL)
    post_in = number(config.COL_POST_CONN_IN_CONTROL)
    post_out = number(config.COL_POST_CONN_OUT_CONTROL)

    drilling_in = number(config.COL_DRILLING_IN_CONTROL)
    drilling_out = number(config.COL_DRILLING_OUT_CONTROL)
    total_drilling = drilling_in + drilling_out
    control_drilling_percent = 0
    if total_drilling > 0:
        control_drilling_percent = round_half_up(drilling_in / total_drilling * 100)

    start_time = parse_timestamp(record.get(config.COL_START_TIME))
    stand_type = record.get(config.COL_STAND_TYPE)

    ops_limits = {
        f"ops_limit_{name}_max_count": to_int(record.get(column))
        for name, column in config.OPS_LIMIT_COLUMNS.items()
    }

    return Stand(
        id=parse_stand_index(record[config.COL_STAND_INDEX]),
        start_depth=start_depth,
        end_depth=end_depth,
        distance_drilled=end_depth - start_depth,
        rop=number(config.COL_ROP),
        wob=number(config.COL_WOB),
        rpm=number(config.COL_RPM),
        torque=number(config.COL_TORQUE),
        flow_rate=number(config.COL_FLOW_RATE),
        rotary_duration=number(config.COL_ROTARY_DURATION) / config.SECONDS_PER_HOUR,
        slide_duration=number(config.COL_SLIDE_DURATION) / config.SECONDS_PER_HOUR,
        connection_time=number(config.COL_CONNECTION),
        pre_connection_time=number(config.COL_PRE_CONNECTION),
        post_connection_time=number(config.COL_POST_CONNECTION),
        pre_connection_in_control=pre_in,
        pre_connection_out_control=pre_out,
        post_connection_in_control=post_in,
        post_connection_out_control=post_out,
        pre_connection_control_percent=control_percent(pre_in, pre_out),
        post_connection_control_percent=control_percent(post_in, post_out),
        drilling_in_control=drilling_in,
        drilling_out_control=drilling_out,
        control_drilling_percent=control_drilling_percent,
        start_time=start_time,
        end_time=parse_timestamp(record.get(config.COL_END_TIME)),
        stand_type=config.DEFAULT_STAND_TYPE if is_empty(stand_type) else str(stand_type).strip(),
        time_range=start_time.strftime("%m/%d/%Y %H:%M") if start_time else "",
        **ops_limits,
    )


def normalize_records(records: List[Record]) -> NormalizedData:
    """Filter, build, de-duplicate and sort stands; the last one is active."""
    valid = [record for record in records if is_valid_record(record)]
    dropped = len(records) - len(valid)
    if dropped:
        logger.debug("Dropped %d of %d rows missing mandatory fields", dropped, len(records))

    if not valid:
        raise NoValidDataError(config.NO_VALID_DATA_MESSAGE)

    by_id = {}
    for record in valid:
        stand = build_stand(record)
        if stand.id in by_id:
            logger.warning("Duplicate StandIndex %d, keeping the later row", stand.id)
        by_id[stand.id] = stand

    stands = sorted(by_id.values(), key=lambda s: s.id)
    stands[-1].is_active = True

    return NormalizedData(
        well_id=resolve_well_id(valid),
        stands=stands,
        raw_count=len(records),
    )
