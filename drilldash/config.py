"""
Centralized configuration for the drilling dashboard.

Column names, thresholds and constants shared by the ingestion
pipeline and the Streamlit page.
"""

import os

# ========================================
# LOGGING
# ========================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# ========================================
# INPUT FILES
# ========================================
TEXT_EXTENSIONS = ["txt", "csv", "tsv"]
EXCEL_EXTENSIONS = ["xlsx", "xls"]
ACCEPTED_EXTENSIONS = TEXT_EXTENSIONS + EXCEL_EXTENSIONS
TEXT_DELIMITER = "\t"

# ========================================
# SOURCE COLUMNS
# ========================================
COL_WELL_ID = "WellId"
COL_STAND_INDEX = "StandIndex"
COL_STAND_TYPE = "StandType"
COL_START_TIME = "StartTimeUTC"
COL_END_TIME = "EndTimeUTC"
COL_START_DEPTH = "StartDepth(ft)"
COL_END_DEPTH = "EndDepth(ft)"
COL_ROP = "OnBottomRop(ft/h)"
COL_WOB = "RotaryWobAvgInControl(1000 lbf)"
COL_RPM = "RotaryRpmAvgInControl(c/min)"
COL_TORQUE = "RotaryTorqueAvgInControl(1000 lbf)"
COL_FLOW_RATE = "RotaryFlowrateAvgInControl(bbl/d)"
COL_ROTARY_DURATION = "RotaryDrillingDuration(s)"
COL_SLIDE_DURATION = "SlideDrillingDuration(s)"
COL_CONNECTION = "ConnectionDuration(s)"
COL_PRE_CONNECTION = "PreConnectionDuration(s)"
COL_POST_CONNECTION = "PostConnectionDuration(s)"
COL_PRE_CONN_IN_CONTROL = "PreConnectionDurationInControl(s)"
COL_PRE_CONN_OUT_CONTROL = "PreConnectionDurationOutControl(s)"
COL_POST_CONN_IN_CONTROL = "PostConnectionDurationInControl(s)"
COL_POST_CONN_OUT_CONTROL = "PostConnectionDurationOutControl(s)"
COL_DRILLING_IN_CONTROL = "DrillingDurationInControl(s)"
COL_DRILLING_OUT_CONTROL = "DrillingDurationOutControl(s)"

# Stand attribute -> ops limit counter column
OPS_LIMIT_COLUMNS = {
    "rop": "OpsLimitsRopMaxChangeCount",
    "wob": "OpsLimitsWobMaxChangeCount",
    "torque": "OpsLimitsTorqueMaxChangeCount",
    "rpm": "OpsLimitsRpmMaxChangeCount",
    "diff_p": "OpsLimitsDiffPMaxChangeCount",
}

# A record without any of these is dropped
MANDATORY_COLUMNS = [COL_STAND_INDEX, COL_START_DEPTH, COL_END_DEPTH, COL_ROP]

# ========================================
# DEFAULTS & DISPLAY
# ========================================
DEFAULT_WELL_ID = "Unknown Well"
DEFAULT_STAND_TYPE = "Drilling"
STAND_LABEL = "Stand {}"
NO_VALID_DATA_MESSAGE = "No valid drilling data found"
UPLOAD_ERROR_MESSAGE = "Failed to process file: {}"
SECONDS_PER_HOUR = 3600
FEET_TO_METERS = 0.3048

# ========================================
# OPERATIONAL LIMITS (chart reference lines)
# ========================================
OPERATIONAL_LIMITS = {
    "rop": {"min": 50, "max": 300, "warning": 250, "critical": 350},
    "wob": {"min": 3, "max": 20, "warning": 18, "critical": 22},
    "rpm": {"min": 40, "max": 90, "warning": 85, "critical": 95},
    "torque": {"min": 0.2, "max": 4.0, "warning": 3.5, "critical": 4.5},
    "flowRate": {"min": 20000, "max": 40000, "warning": 38000, "critical": 41000},
}

# ========================================
# STAND INDICATOR THRESHOLDS
# ========================================
HIGH_ROP = 100
LOW_ROP = 50
HIGH_WOB = 15
LONG_SECTION_FT = 90
HIGH_CONTROL_PERCENT = 80
LOW_CONTROL_PERCENT = 40

# ========================================
# TIME RANGE PRESETS
# ========================================
TIME_PRESET_HOURS = {"12h": 12, "24h": 24, "7d": 7 * 24}
TIME_PRESETS = list(TIME_PRESET_HOURS) + ["all"]
FALLBACK_RANGE_DAYS = 30
BREAKDOWN_HOURS = [6, 12, 24]
