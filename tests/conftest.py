"""Shared fixtures: small drilling exports built in memory."""

import io

import pandas as pd
import pytest

from drilldash.normalize import build_stand

HEADERS = [
    "WellId",
    "StandIndex",
    "StandType",
    "StartTimeUTC",
    "EndTimeUTC",
    "StartDepth(ft)",
    "EndDepth(ft)",
    "OnBottomRop(ft/h)",
    "RotaryWobAvgInControl(1000 lbf)",
    "RotaryRpmAvgInControl(c/min)",
    "ConnectionDuration(s)",
    "PreConnectionDuration(s)",
    "PostConnectionDuration(s)",
    "PreConnectionDurationInControl(s)",
    "PreConnectionDurationOutControl(s)",
    "PostConnectionDurationInControl(s)",
    "PostConnectionDurationOutControl(s)",
    "DrillingDurationInControl(s)",
    "DrillingDurationOutControl(s)",
    "OpsLimitsRopMaxChangeCount",
    "OpsLimitsWobMaxChangeCount",
]


def to_tsv(rows, headers=HEADERS):
    """Render row dicts as tab-delimited bytes with a header line."""
    lines = ["\t".join(headers)]
    for row in rows:
        lines.append("\t".join(str(row.get(h, "")) for h in headers))
    return ("\n".join(lines) + "\n").encode("utf-8")


def to_xlsx(rows, headers=HEADERS):
    buffer = io.BytesIO()
    pd.DataFrame(rows, columns=headers).to_excel(buffer, index=False)
    return buffer.getvalue()


def make_stand(**fields):
    """Build a Stand from a minimal valid record plus overrides."""
    record = {
        "StandIndex": "1",
        "StartDepth(ft)": "6500",
        "EndDepth(ft)": "6530",
        "OnBottomRop(ft/h)": "100",
    }
    record.update(fields)
    return build_stand(record)


@pytest.fixture
def scenario_rows():
    """Two stands: the first with pre-connection control data, the second without."""
    return [
        {
            "WellId": "Max Test",
            "StandIndex": 1,
            "StartTimeUTC": "2024-03-01T06:15:00Z",
            "StartDepth(ft)": 6500,
            "EndDepth(ft)": 6530,
            "OnBottomRop(ft/h)": 120,
            "PreConnectionDurationInControl(s)": 180,
            "PreConnectionDurationOutControl(s)": 60,
        },
        {
            "WellId": "Max Test",
            "StandIndex": 2,
            "StartTimeUTC": "2024-03-01T14:40:00Z",
            "StartDepth(ft)": 6530,
            "EndDepth(ft)": 6560,
            "OnBottomRop(ft/h)": 90,
        },
    ]


@pytest.fixture
def drilling_rows():
    """Five stands out of order, plus one row missing its ROP."""
    return [
        {
            "WellId": "Well-7", "StandIndex": 3, "StandType": "Drilling",
            "StartTimeUTC": "2024-03-02T10:00:00Z", "EndTimeUTC": "2024-03-02T11:00:00Z",
            "StartDepth(ft)": 6560, "EndDepth(ft)": 6650, "OnBottomRop(ft/h)": 140,
            "RotaryWobAvgInControl(1000 lbf)": 16.5, "RotaryRpmAvgInControl(c/min)": 80,
            "ConnectionDuration(s)": 300, "PreConnectionDuration(s)": 120,
            "PostConnectionDuration(s)": 90,
            "PreConnectionDurationInControl(s)": 100, "PreConnectionDurationOutControl(s)": 20,
            "PostConnectionDurationInControl(s)": 45, "PostConnectionDurationOutControl(s)": 45,
            "DrillingDurationInControl(s)": 2700, "DrillingDurationOutControl(s)": 900,
            "OpsLimitsRopMaxChangeCount": 2, "OpsLimitsWobMaxChangeCount": 1,
        },
        {
            "WellId": "Well-7", "StandIndex": 1,
            "StartTimeUTC": "2024-03-01T02:00:00Z",
            "StartDepth(ft)": 6500, "EndDepth(ft)": 6530, "OnBottomRop(ft/h)": 120,
            "ConnectionDuration(s)": 240, "PreConnectionDuration(s)": 100,
            "PostConnectionDuration(s)": 80,
            "DrillingDurationInControl(s)": 1800, "DrillingDurationOutControl(s)": 1800,
            "OpsLimitsRopMaxChangeCount": 1,
        },
        {
            "WellId": "Well-7", "StandIndex": 4,
            "StartDepth(ft)": 6650, "EndDepth(ft)": 6700,
        },
        {
            "WellId": "Well-7", "StandIndex": 2,
            "StartTimeUTC": "2024-03-01T20:00:00Z",
            "StartDepth(ft)": 6530, "EndDepth(ft)": 6560, "OnBottomRop(ft/h)": 45,
            "ConnectionDuration(s)": 360, "PreConnectionDuration(s)": 150,
            "PostConnectionDuration(s)": 110,
            "DrillingDurationInControl(s)": 0, "DrillingDurationOutControl(s)": 0,
            "OpsLimitsWobMaxChangeCount": 3,
        },
    ]
