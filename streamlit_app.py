import dataclasses
import logging
from datetime import date

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from drilldash import aggregate, config
from drilldash.adapter import (
    active_stand,
    current_params,
    filter_by_time_range,
    select_stand,
    stands_frame,
    time_range_for_preset,
)
from drilldash.pipeline import ingest_upload, load_dashboard

logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO), format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)

# ========================================
# PAGE CONFIG & TITLE
# ========================================
st.set_page_config(page_title="Drilling Stand Dashboard", layout="wide")
st.title("Drilling Stand Dashboard")
st.caption("Stand-by-stand drilling performance, connection timing and ops limits")

if "dashboard" not in st.session_state:
    st.session_state.dashboard = None
if "upload_error" not in st.session_state:
    st.session_state.upload_error = None
if "upload_key" not in st.session_state:
    st.session_state.upload_key = None


def format_seconds(seconds):
    """Seconds as M:SS."""
    if seconds is None or pd.isna(seconds):
        return "0:00"
    return f"{int(seconds // 60)}:{int(seconds % 60):02d}"


@st.cache_data(show_spinner=False)
def process_upload(filename, content):
    return load_dashboard(filename, content)


# ========================================
# SIDEBAR: CONTROLS
# ========================================
with st.sidebar:
    st.header("📊 Drilling Data Upload")
    data_file = st.file_uploader(
        "Upload Drilling Data",
        type=config.ACCEPTED_EXTENSIONS,
        help="Tab-delimited text (.txt, .csv, .tsv) or Excel (.xlsx, .xls)"
    )

    with st.expander("ℹ️ Required Data Format"):
        st.markdown("""
        **Text files:** tab-delimited, header row first.

        **Excel files:** first sheet, header row first.

        **Required columns:**
        - `StandIndex`, `StartDepth(ft)`, `EndDepth(ft)`, `OnBottomRop(ft/h)`

        **Optional columns:**
        - `WellId`, `StandType`, `StartTimeUTC`, `EndTimeUTC`
        - `RotaryWobAvgInControl(1000 lbf)`, `RotaryRpmAvgInControl(c/min)`
        - `RotaryTorqueAvgInControl(1000 lbf)`, `RotaryFlowrateAvgInControl(bbl/d)`
        - `ConnectionDuration(s)`, `PreConnectionDuration(s)`, `PostConnectionDuration(s)`
        - `Pre/PostConnectionDurationIn/OutControl(s)`
        - `DrillingDurationInControl(s)`, `DrillingDurationOutControl(s)`
        - `OpsLimits{Rop,Wob,Torque,Rpm,DiffP}MaxChangeCount`

        Rows missing a required column are skipped.
        """)

# ========================================
# UPLOAD BOUNDARY
# ========================================
if data_file is not None:
    # The previous dataset stays on screen when processing fails
    with st.spinner(f"Processing {data_file.name}..."):
        if ingest_upload(st.session_state, data_file, loader=process_upload):
            logger.info("Handled upload %s", data_file.name)

if st.session_state.upload_error:
    st.error(st.session_state.upload_error)

dashboard = st.session_state.dashboard
if dashboard is None:
    st.info("Upload a drilling data file to populate the dashboard.")
    st.stop()

# ========================================
# STAND SELECTION & TIME RANGE
# ========================================
with st.sidebar:
    st.header("Controls")
    stand_ids = [s.id for s in dashboard.stands]
    selected = active_stand(dashboard.stands)
    selected_id = st.selectbox(
        "Selected Stand",
        options=stand_ids,
        index=stand_ids.index(selected.id) if selected else len(stand_ids) - 1,
        format_func=lambda i: f"Stand {i}"
    )
    preset = st.radio("Time Range", options=config.TIME_PRESETS, index=config.TIME_PRESETS.index("all"), horizontal=True)

if selected is None or selected_id != selected.id:
    stands = select_stand(dashboard.stands, selected_id)
    dashboard = dataclasses.replace(
        dashboard,
        stands=stands,
        current_params=current_params(active_stand(stands)),
    )
    st.session_state.dashboard = dashboard

range_start, range_end = time_range_for_preset(preset, dashboard.stands)
filtered_stands, filtered_charts = filter_by_time_range(
    dashboard.stands, dashboard.chart_data, range_start, range_end
)
metrics = aggregate.drilling_metrics(filtered_stands)
ops_limits = aggregate.ops_limit_totals(filtered_stands)

# ========================================
# WELL HEADER
# ========================================
info = dashboard.well_info
col1, col2, col3, col4 = st.columns(4)
with col1:
    st.metric("Well", info.well_id)
    st.metric("Total Stands", f"{info.total_stands}")
with col2:
    st.metric("Total Depth", f"{info.total_depth:.2f} ft")
    st.metric("Current Stand", f"{info.current_stand}")
with col3:
    st.metric("Footage Drilled", f"{metrics['total_distance_drilled']:.1f} ft")
    st.metric("Footage (m)", f"{metrics['total_meters']:.1f} m")
with col4:
    st.metric("Control Drilling", f"{metrics['total_control_drilling_percent']:.1f}%")
    st.metric("In-Control Footage", f"{metrics['drill_in_control_distance']:.1f} ft")

st.caption(f"Showing {len(filtered_stands)} of {len(dashboard.stands)} stands ({range_start} to {range_end})")

# ========================================
# CURRENT PARAMETERS
# ========================================
st.markdown("---")
st.markdown(f"## ⚙️ Stand {selected_id} Parameters")
params = dashboard.current_params
col1, col2, col3, col4, col5 = st.columns(5)
with col1:
    st.metric("ROP", f"{params.rop:.1f} ft/hr")
with col2:
    st.metric("WOB", f"{params.wob:.2f} klbs")
with col3:
    st.metric("RPM", f"{params.rpm:.1f}")
with col4:
    st.metric("Torque", f"{params.torque:.3f} klbf-ft")
with col5:
    st.metric("Control Drilling", f"{params.control_drilling_percent}%")

# ========================================
# DRILLING PARAMETER CHARTS
# ========================================
CHARTS = [
    ("rop", "Rate of Penetration", "ROP (ft/hr)", "orange"),
    ("wob", "Weight on Bit", "WOB (klbs)", "cyan"),
    ("rpm", "Rotary Speed", "RPM", "lime"),
    ("torque", "Torque", "Torque (klbf-ft)", "magenta"),
]

tab_params, tab_connections, tab_limits, tab_analysis = st.tabs(
    ["Drilling Parameters", "Connections", "Ops Limits", "Analysis"]
)

with tab_params:
    col1, col2 = st.columns(2)
    for i, (key, title, axis_title, color) in enumerate(CHARTS):
        series = filtered_charts[key]
        limits = config.OPERATIONAL_LIMITS[key]
        stats = aggregate.series_stats(series.data)
        fig = go.Figure()
        fig.add_trace(go.Scatter(
            x=series.labels,
            y=series.data,
            mode='lines+markers',
            line=dict(color=color, width=2),
            marker=dict(size=5),
            name=title
        ))
        fig.add_hline(y=limits["warning"], line_dash="dash", line_color="yellow",
                      annotation_text="Warning", annotation_position="right")
        fig.add_hline(y=limits["critical"], line_dash="dash", line_color="red",
                      annotation_text="Critical", annotation_position="right")
        buffer = (max(stats["max"], limits["critical"]) - min(stats["min"], limits["min"])) * 0.1
        fig.update_layout(
            title=title,
            yaxis_title=axis_title,
            yaxis=dict(range=[
                max(0, min(stats["min"], limits["min"]) - buffer),
                max(stats["max"], limits["critical"]) + buffer,
            ]),
            height=350,
            template='plotly_dark',
            hovermode='x unified'
        )
        with (col1 if i % 2 == 0 else col2):
            st.plotly_chart(fig, use_container_width=True)

    depth = filtered_charts["depth"]
    control = filtered_charts["controlPercent"]
    fig_depth = go.Figure()
    fig_depth.add_trace(go.Bar(x=control.labels, y=control.data, name='Control %',
                               marker_color='rgba(52, 168, 83, 0.7)', yaxis='y2'))
    fig_depth.add_trace(go.Scatter(x=depth.labels, y=depth.data, mode='lines+markers',
                                   name='Depth (ft)', line=dict(color='cyan', width=2)))
    fig_depth.update_layout(
        title='Depth & Control Drilling by Stand',
        yaxis=dict(title='Depth (ft)', autorange='reversed'),
        yaxis2=dict(title='Control %', overlaying='y', side='right', range=[0, 100]),
        height=400,
        template='plotly_dark',
        legend=dict(x=0.02, y=0.98)
    )
    st.plotly_chart(fig_depth, use_container_width=True)

# ========================================
# CONNECTIONS
# ========================================
with tab_connections:
    kpis = dashboard.connection_kpis
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Avg Connection", format_seconds(kpis["connection_time"]))
    with col2:
        st.metric("Avg Pre-Connection", format_seconds(kpis["pre_connection_time"]))
        st.metric("Pre-Connection Control", f"{metrics['pre_connection_control_percent']:.1f}%")
    with col3:
        st.metric("Avg Post-Connection", format_seconds(kpis["post_connection_time"]))
        st.metric("Post-Connection Control", f"{metrics['post_connection_control_percent']:.1f}%")

    col1, col2 = st.columns(2)
    for col, phase in ((col1, "pre"), (col2, "post")):
        in_series = filtered_charts[f"{phase}ConnectionControl"]
        out_series = filtered_charts[f"{phase}ConnectionManual"]
        fig_conn = go.Figure()
        fig_conn.add_trace(go.Bar(x=in_series.labels, y=in_series.data, name='Control',
                                  marker_color='#34a853'))
        fig_conn.add_trace(go.Bar(x=out_series.labels, y=out_series.data, name='Manual',
                                  marker_color='#fbbc04'))
        fig_conn.update_layout(
            title=f"{phase.capitalize()}-Connection Control vs Manual",
            barmode='stack',
            yaxis_title='Duration (s)',
            height=350,
            template='plotly_dark'
        )
        with col:
            st.plotly_chart(fig_conn, use_container_width=True)

    conn = filtered_charts["connectionTime"]
    fig_total = go.Figure()
    fig_total.add_trace(go.Scatter(x=conn.labels, y=conn.data, mode='lines+markers',
                                   name='Connection Time', line=dict(color='orange', width=2)))
    fig_total.add_hline(y=kpis["connection_time"], line_dash="dot", line_color="white",
                        annotation_text="Average", annotation_position="right")
    fig_total.update_layout(title='Connection Time by Stand', yaxis_title='Duration (s)',
                            height=350, template='plotly_dark')
    st.plotly_chart(fig_total, use_container_width=True)

# ========================================
# OPS LIMITS
# ========================================
LIMIT_COLORS = {
    "rop": '#1a73e8',
    "wob": '#34a853',
    "torque": '#fbbc04',
    "rpm": '#ea4335',
    "diff_p": '#9334e8',
}
LIMIT_SERIES = {
    "rop": "ropMaxCounts",
    "wob": "wobMaxCounts",
    "torque": "torqueMaxCounts",
    "rpm": "rpmMaxCounts",
    "diff_p": "diffPMaxCounts",
}

with tab_limits:
    cols = st.columns(len(ops_limits))
    for col, (name, count) in zip(cols, ops_limits.items()):
        with col:
            st.metric(f"{name.replace('_', ' ').upper()} Limits", f"{count}")

    fig_limits = go.Figure()
    for name, key in LIMIT_SERIES.items():
        series = filtered_charts[key]
        fig_limits.add_trace(go.Bar(x=series.labels, y=series.data,
                                    name=name.replace('_', ' ').upper(),
                                    marker_color=LIMIT_COLORS[name]))
    fig_limits.update_layout(title='Ops Limit Changes by Stand', barmode='stack',
                             yaxis_title='Count', height=400, template='plotly_dark')
    st.plotly_chart(fig_limits, use_container_width=True)

# ========================================
# MULTI-STAND & TIME BREAKDOWN
# ========================================
with tab_analysis:
    st.markdown("### Multi-Stand Analysis")
    picked = st.multiselect(
        "Stands to compare",
        options=stand_ids,
        default=stand_ids[-5:],
        format_func=lambda i: f"Stand {i}"
    )
    picked_stands = [s for s in dashboard.stands if s.id in picked]
    summary = aggregate.multi_stand_summary(picked_stands)
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Avg ROP", f"{summary['avg_rop']:.2f} ft/hr")
        st.metric("Avg WOB", f"{summary['avg_wob']:.2f} klbs")
    with col2:
        st.metric("Avg RPM", f"{summary['avg_rpm']:.1f}")
        st.metric("Avg Torque", f"{summary['avg_torque']:.3f}")
    with col3:
        st.metric("Avg Control", f"{summary['avg_control_percent']:.1f}%")
        st.metric("Total Distance", f"{summary['total_distance']:.1f} ft")
    with col4:
        st.metric("Avg Connection", format_seconds(summary['avg_total_connection_time']))
        st.metric("Connection Control", f"{summary['avg_total_connection_control']:.1f}%")

    st.markdown("### Daily Time Breakdown")
    dated = [s.start_time.date() for s in dashboard.stands if s.start_time]
    if dated:
        col1, col2 = st.columns(2)
        with col1:
            day = st.date_input("Day", value=max(dated), min_value=min(dated), max_value=max(dated))
        with col2:
            hours = st.selectbox("Interval (hours)", options=config.BREAKDOWN_HOURS, index=2)
        breakdown = aggregate.time_breakdown(dashboard.stands, day if isinstance(day, date) else max(dated), hours)
        st.caption(
            f"{breakdown['stands_count']} stands, {breakdown['total_footage']:.1f} ft, "
            f"{breakdown['avg_control_percent']:.1f}% control"
        )
        st.dataframe(pd.DataFrame([
            {
                "Interval": interval["label"],
                "Stands": interval["stands_count"],
                "Footage (ft)": interval["total_footage"],
                "Control %": interval["avg_control_percent"],
                "Pre-Conn Control %": interval["pre_conn_control_percent"],
                "Post-Conn Control %": interval["post_conn_control_percent"],
            }
            for interval in breakdown["intervals"]
        ]), use_container_width=True)
    else:
        st.info("No stand start times in this file, daily breakdown unavailable.")

# ========================================
# STAND HISTORY
# ========================================
st.markdown("---")
st.markdown("## 📋 Stand History")
st.dataframe(
    stands_frame(filtered_stands).style.format({
        'Start Depth (ft)': '{:.1f}',
        'End Depth (ft)': '{:.1f}',
        'Distance (ft)': '{:.1f}',
        'ROP (ft/hr)': '{:.1f}',
        'WOB (klbs)': '{:.2f}',
        'RPM': '{:.1f}',
        'Torque': '{:.3f}',
    }),
    height=400
)
