import streamlit as st

try:
    from app.sections import (
        render_charts_section,
        render_kpi_section,
        render_map_section,
        render_policy_table_section,
        show_policy_dialog,
    )
    from app.shared import build_engine, configure_logging, load_dashboard_sources, pop_open_policy_id
    from app.theme import apply_global_styles
except ModuleNotFoundError:
    from sections import (
        render_charts_section,
        render_kpi_section,
        render_map_section,
        render_policy_table_section,
        show_policy_dialog,
    )
    from shared import build_engine, configure_logging, load_dashboard_sources, pop_open_policy_id
    from theme import apply_global_styles

from nev_policy.loader import DatasetLoadError
from nev_policy.views import policy_detail

st.set_page_config(
    page_title="China NEV Policy Dashboard",
    page_icon="🔋",
    layout="wide",
)
configure_logging()
apply_global_styles()

st.title("China NEV Policy Dashboard")
st.caption("Provincial new-energy-vehicle policies by year and financial instrument.")

try:
    loaded = load_dashboard_sources()
except DatasetLoadError as exc:
    st.error(f"**Error Loading Dashboard**\n\n{exc}")
    st.stop()

engine = build_engine()

render_kpi_section(loaded.dataset)
render_map_section(loaded.dataset, loaded.geometry)
render_charts_section(loaded.dataset)
render_policy_table_section(engine)

policy_id = pop_open_policy_id()
if policy_id is not None:
    detail = policy_detail(engine, policy_id)
    if detail is not None:
        show_policy_dialog(detail)
