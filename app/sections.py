from __future__ import annotations

import html
import sys
from functools import partial
from pathlib import Path
from typing import Any

import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

try:
    from app.shared import (
        clear_selection,
        on_instrument_select,
        on_map_select,
        on_table_select,
        widget_key,
    )
    from app.theme import (
        MAP_COLOR_SCALE,
        MAP_VALUE_RANGE,
        THEME_COLORS,
        apply_standard_chart_layout,
    )
except ModuleNotFoundError:
    from shared import (
        clear_selection,
        on_instrument_select,
        on_map_select,
        on_table_select,
        widget_key,
    )
    from theme import MAP_COLOR_SCALE, MAP_VALUE_RANGE, THEME_COLORS, apply_standard_chart_layout

try:
    from nev_policy.geometry import region_names
    from nev_policy.metrics import (
        instrument_ranking,
        kpi_summary,
        province_map_series,
        timeline_series,
    )
    from nev_policy.model import Dataset
    from nev_policy.selection import SelectionEngine
    from nev_policy.views import (
        EMPTY_TABLE_MESSAGE,
        DetailBlock,
        PolicyDetail,
        kpi_slots,
        table_frame,
    )
except ModuleNotFoundError:
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))
    from nev_policy.geometry import region_names
    from nev_policy.metrics import (
        instrument_ranking,
        kpi_summary,
        province_map_series,
        timeline_series,
    )
    from nev_policy.model import Dataset
    from nev_policy.selection import SelectionEngine
    from nev_policy.views import (
        EMPTY_TABLE_MESSAGE,
        DetailBlock,
        PolicyDetail,
        kpi_slots,
        table_frame,
    )

VISIBLE_TABLE_COLUMNS = ["title", "province", "year", "tags", "full_title"]

KPI_LABELS = {
    "kpi-total": "Total Policies",
    "kpi-top-inst": "Top Instrument",
    "kpi-provinces": "Provinces Covered",
}


def render_kpi_section(dataset: Dataset) -> None:
    slots = kpi_slots(kpi_summary(dataset))
    columns = st.columns(len(KPI_LABELS))
    for column, (slot, label) in zip(columns, KPI_LABELS.items()):
        column.markdown(
            f'<div class="kpi-card" id="{slot}">'
            f'<div class="kpi-label">{label}</div>'
            f'<div class="kpi-value">{html.escape(slots[slot])}</div>'
            "</div>",
            unsafe_allow_html=True,
        )


def build_province_map(dataset: Dataset, geometry: dict[str, Any]) -> go.Figure:
    series = province_map_series(dataset)
    names = region_names(geometry)

    fig = go.Figure()
    # base layer so regions without data still draw and stay clickable
    fig.add_trace(
        go.Choropleth(
            geojson=geometry,
            featureidkey="properties.name",
            locations=names,
            z=[0] * len(names),
            customdata=[[name] for name in names],
            colorscale=[[0.0, THEME_COLORS["map_no_data"]], [1.0, THEME_COLORS["map_no_data"]]],
            showscale=False,
            marker_line_color=THEME_COLORS["border"],
            hovertemplate="%{location}: 0<extra></extra>",
        )
    )
    if not series.empty:
        fig.add_trace(
            go.Choropleth(
                geojson=geometry,
                featureidkey="properties.name",
                locations=series["name"],
                z=series["value"],
                zmin=MAP_VALUE_RANGE[0],
                zmax=MAP_VALUE_RANGE[1],
                customdata=series[["name", "intensity"]].to_numpy(),
                colorscale=MAP_COLOR_SCALE,
                marker_line_color=THEME_COLORS["border"],
                colorbar={"title": "Policies"},
                hovertemplate=(
                    "%{location}<br>Policies: %{z}<br>Subsidies: %{customdata[1]}<extra></extra>"
                ),
            )
        )
    fig.update_geos(fitbounds="locations", visible=False)
    apply_standard_chart_layout(fig, height=480)
    return fig


def render_map_section(dataset: Dataset, geometry: dict[str, Any]) -> None:
    st.subheader("Policy Density by Province")
    key = widget_key("province_map")
    st.plotly_chart(
        build_province_map(dataset, geometry),
        use_container_width=True,
        key=key,
        on_select=partial(on_map_select, key),
        selection_mode=("points",),
    )
    st.caption("Click a province to list its policies.")


def build_timeline_chart(dataset: Dataset) -> go.Figure:
    timeline = timeline_series(dataset)
    fig = px.line(
        timeline,
        x="year",
        y="count",
        markers=True,
        line_shape="spline",
        labels={"year": "Year", "count": "New Policies"},
    )
    fig.update_traces(
        line_color=THEME_COLORS["accent"],
        fill="tozeroy",
        fillcolor=THEME_COLORS["accent_soft"],
    )
    # years keep dataset order
    fig.update_xaxes(type="category", showgrid=False)
    apply_standard_chart_layout(fig)
    return fig


def build_instrument_chart(dataset: Dataset) -> go.Figure:
    ranking = instrument_ranking(dataset)
    fig = px.bar(
        ranking,
        x="count",
        y="label",
        orientation="h",
        custom_data=["code"],
        labels={"count": "Count", "label": "Instrument"},
    )
    fig.update_traces(
        marker_color=THEME_COLORS["accent"],
        hovertemplate="%{y}: %{x}<extra></extra>",
    )
    fig.update_yaxes(autorange="reversed", showgrid=False)
    apply_standard_chart_layout(fig)
    return fig


def render_charts_section(dataset: Dataset) -> None:
    left_col, right_col = st.columns((1, 1))
    with left_col:
        st.subheader("Policy Timeline")
        if not dataset.timeline:
            st.info("No timeline data in this dataset.")
        else:
            st.plotly_chart(build_timeline_chart(dataset), use_container_width=True)

    with right_col:
        st.subheader("Top Instruments")
        if not dataset.global_instruments:
            st.info("No instrument data in this dataset.")
        else:
            key = widget_key("instrument_chart")
            st.plotly_chart(
                build_instrument_chart(dataset),
                use_container_width=True,
                key=key,
                on_select=partial(on_instrument_select, key),
                selection_mode=("points",),
            )
            st.caption("Click a bar to filter the table by instrument.")


def render_policy_table_section(engine: SelectionEngine) -> None:
    header_col, action_col = st.columns((4, 1))
    header_col.subheader(engine.heading())
    if engine.selection.is_filtered:
        action_col.button("Show all policies", on_click=clear_selection)

    frame = table_frame(engine.visible())
    if frame.empty:
        st.info(EMPTY_TABLE_MESSAGE)
        return

    key = widget_key("policy_table")
    st.dataframe(
        frame,
        use_container_width=True,
        hide_index=True,
        key=key,
        on_select=partial(on_table_select, key, frame["policy_id"].tolist()),
        selection_mode="single-row",
        column_order=VISIBLE_TABLE_COLUMNS,
        column_config={
            "title": st.column_config.TextColumn("Title", width="large"),
            "province": st.column_config.TextColumn("Province"),
            "year": st.column_config.TextColumn("Year", width="small"),
            "tags": st.column_config.TextColumn("Instruments"),
            "full_title": st.column_config.TextColumn(
                "Full Title",
                width="small",
                help="Untruncated title; hover or widen the column to read it.",
            ),
        },
    )
    st.caption("Select a row to open the policy evidence.")


def _detail_block_html(block: DetailBlock) -> str:
    if block.is_empty:
        return f"<p>{html.escape(block.empty_message)}</p>"

    parts = []
    for item in block.items:
        quote = (
            f'<span class="evidence-quote">"{html.escape(item.evidence)}"</span>'
            if item.evidence
            else ""
        )
        parts.append(
            '<div class="detail-item">'
            f"<strong>{html.escape(item.label)}</strong>"
            f"<div>{html.escape(item.value)}</div>"
            f"{quote}"
            "</div>"
        )
    return "".join(parts)


@st.dialog("Policy Evidence", width="large")
def show_policy_dialog(detail: PolicyDetail) -> None:
    st.markdown(f"#### {detail.title}")

    st.markdown("**Quantitative Targets**")
    st.markdown(_detail_block_html(detail.targets), unsafe_allow_html=True)

    st.markdown("**Financial Instruments**")
    st.markdown(_detail_block_html(detail.finance), unsafe_allow_html=True)

    st.markdown("**Other Instruments**")
    if detail.other.is_empty:
        st.markdown(detail.other.empty_message)
    else:
        tags = "".join(f'<span class="tag">{html.escape(tag)}</span>' for tag in detail.other.tags)
        st.markdown(tags, unsafe_allow_html=True)
