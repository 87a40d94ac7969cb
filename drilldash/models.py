"""Data structures produced by the ingestion pipeline."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, List, Optional

from drilldash import config


@dataclass
class Stand:
    """One drill-pipe stand and the drilling done while it was in the string."""

    id: int
    start_depth: float
    end_depth: float
    distance_drilled: float
    rop: float = 0.0
    wob: float = 0.0
    rpm: float = 0.0
    torque: float = 0.0
    flow_rate: float = 0.0
    rotary_duration: float = 0.0
    slide_duration: float = 0.0
    connection_time: float = 0.0
    pre_connection_time: float = 0.0
    post_connection_time: float = 0.0
    pre_connection_in_control: float = 0.0
    pre_connection_out_control: float = 0.0
    post_connection_in_control: float = 0.0
    post_connection_out_control: float = 0.0
    pre_connection_control_percent: float = 0.0
    post_connection_control_percent: float = 0.0
    drilling_in_control: float = 0.0
    drilling_out_control: float = 0.0
    control_drilling_percent: int = 0
    ops_limit_rop_max_count: int = 0
    ops_limit_wob_max_count: int = 0
    ops_limit_torque_max_count: int = 0
    ops_limit_rpm_max_count: int = 0
    ops_limit_diff_p_max_count: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    stand_type: str = config.DEFAULT_STAND_TYPE
    time_range: str = ""
    is_active: bool = False

    @property
    def title(self) -> str:
        return config.STAND_LABEL.format(self.id)

    @property
    def depth(self) -> float:
        return self.end_depth

    def ops_limit_count(self, limit: str) -> int:
        return getattr(self, f"ops_limit_{limit}_max_count")

    def with_active(self, is_active: bool) -> "Stand":
        return replace(self, is_active=is_active)


@dataclass
class TimeSeries:
    labels: List[str] = field(default_factory=list)
    data: List[float] = field(default_factory=list)

    def __len__(self):
        return len(self.labels)


@dataclass
class NormalizedData:
    well_id: str
    stands: List[Stand]
    raw_count: int = 0


@dataclass
class WellInfo:
    well_id: str
    total_stands: int
    total_depth: float
    current_stand: Optional[int]


@dataclass
class CurrentParams:
    wob: float = 0.0
    rop: float = 0.0
    rpm: float = 0.0
    torque: float = 0.0
    flow_rate: float = 0.0
    depth: float = 0.0
    rotary_duration: float = 0.0
    slide_duration: float = 0.0
    connection_time: float = 0.0
    pre_connection_time: float = 0.0
    post_connection_time: float = 0.0
    pre_connection_in_control: float = 0.0
    pre_connection_out_control: float = 0.0
    post_connection_in_control: float = 0.0
    post_connection_out_control: float = 0.0
    control_drilling_percent: int = 0


@dataclass
class DashboardData:
    """Everything the dashboard page renders for one uploaded file."""

    well_id: str
    stands: List[Stand]
    chart_data: Dict[str, TimeSeries]
    current_params: CurrentParams
    well_info: WellInfo
    connection_kpis: Dict[str, float]
    ops_limits: Dict[str, int]
    drilling_metrics: Dict[str, float]
