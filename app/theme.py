from __future__ import annotations

import plotly.graph_objects as go
import plotly.io as pio
import streamlit as st

BASE_FONT = "'Inter', 'Lato', sans-serif"
PLOTLY_TEMPLATE_NAME = "policy_dashboard_dark"

THEME_COLORS = {
    "bg": "#0f172a",
    "surface_1": "#1e293b",
    "surface_2": "#273449",
    "border": "#475569",
    "text": "#f1f5f9",
    "muted": "#94a3b8",
    "accent": "#38bdf8",
    "accent_soft": "rgba(56, 189, 248, 0.1)",
    "accent_hover": "#bae6fd",
    "accent_strong": "#0284c7",
    "grid": "rgba(255, 255, 255, 0.1)",
    "map_no_data": "#1e293b",
    "quote": "#cbd5e1",
}

# choropleth ramp from empty to busiest province
MAP_COLOR_SCALE = [[0.0, THEME_COLORS["map_no_data"]], [1.0, THEME_COLORS["accent"]]]
MAP_VALUE_RANGE = (0, 20)


def _build_plotly_template() -> go.layout.Template:
    return go.layout.Template(
        layout={
            "paper_bgcolor": "rgba(0,0,0,0)",
            "plot_bgcolor": "rgba(0,0,0,0)",
            "font": {"family": BASE_FONT, "size": 12, "color": THEME_COLORS["text"]},
            "colorway": [THEME_COLORS["accent"]],
            "xaxis": {"gridcolor": THEME_COLORS["grid"], "zeroline": False},
            "yaxis": {"gridcolor": THEME_COLORS["grid"], "zeroline": False},
            "geo": {
                "bgcolor": "rgba(0,0,0,0)",
                "showland": False,
                "showcountries": False,
                "showcoastlines": False,
                "showframe": False,
            },
        }
    )


def _ensure_plotly_template() -> None:
    if PLOTLY_TEMPLATE_NAME not in pio.templates:
        pio.templates[PLOTLY_TEMPLATE_NAME] = _build_plotly_template()


def apply_standard_chart_layout(fig: go.Figure, *, height: int = 360) -> None:
    _ensure_plotly_template()
    fig.update_layout(
        template=PLOTLY_TEMPLATE_NAME,
        height=height,
        showlegend=False,
        margin={"t": 20, "b": 30, "l": 20, "r": 20},
    )


def _build_global_css() -> str:
    colors = THEME_COLORS
    return f"""
<style>
.kpi-card {{
  background: {colors["surface_1"]};
  border: 1px solid {colors["border"]};
  border-radius: 12px;
  padding: 1rem 1.25rem;
}}
.kpi-card .kpi-label {{
  color: {colors["muted"]};
  font-size: 0.8rem;
  text-transform: uppercase;
  letter-spacing: 0.05em;
}}
.kpi-card .kpi-value {{
  color: {colors["text"]};
  font-size: 1.6rem;
  font-weight: 700;
}}
.tag {{
  display: inline-block;
  background: {colors["accent_soft"]};
  color: {colors["accent"]};
  border-radius: 999px;
  padding: 0.1rem 0.6rem;
  margin: 0.15rem;
  font-size: 0.8rem;
}}
.detail-item {{
  margin-bottom: 0.75rem;
}}
.evidence-quote {{
  display: block;
  color: {colors["quote"]};
  font-style: italic;
  font-size: 0.85rem;
  border-left: 2px solid {colors["accent"]};
  padding-left: 0.5rem;
  margin-top: 0.25rem;
}}
</style>
"""


def apply_global_styles() -> None:
    _ensure_plotly_template()
    pio.templates.default = PLOTLY_TEMPLATE_NAME
    st.html(_build_global_css())
