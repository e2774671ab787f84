from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

import streamlit as st

try:
    from nev_policy.loader import DashboardSources, LoadedSources, load_sources
    from nev_policy.selection import Selection, SelectionEngine
except ModuleNotFoundError:
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))
    from nev_policy.loader import DashboardSources, LoadedSources, load_sources
    from nev_policy.selection import Selection, SelectionEngine

logger = logging.getLogger(__name__)

SOURCES_KEY = "loaded_sources"
SELECTION_KEY = "policy_selection"
OPEN_POLICY_KEY = "open_policy_id"
WIDGET_EPOCH_KEY = "_widget_epoch"


def configure_logging() -> None:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")


def sources_for_session(state: MutableMapping[str, Any], sources: DashboardSources) -> LoadedSources:
    """Load once per browser session; a page reload starts a new session and refetches."""
    loaded = state.get(SOURCES_KEY)
    if isinstance(loaded, LoadedSources):
        return loaded
    loaded = load_sources(sources)
    state[SOURCES_KEY] = loaded
    return loaded


def load_dashboard_sources() -> LoadedSources:
    if SOURCES_KEY in st.session_state:
        return sources_for_session(st.session_state, DashboardSources.from_env())
    with st.spinner("Loading policy dataset..."):
        return sources_for_session(st.session_state, DashboardSources.from_env())


def current_selection() -> Selection:
    selection = st.session_state.get(SELECTION_KEY)
    if isinstance(selection, Selection):
        return selection
    return Selection.unfiltered()


def build_engine() -> SelectionEngine:
    return SelectionEngine(load_dashboard_sources().dataset.policies, current_selection())


def widget_key(name: str) -> str:
    """Key for a clickable widget; bumping the epoch drops stale click state."""
    return f"{name}_{st.session_state.get(WIDGET_EPOCH_KEY, 0)}"


def _bump_widget_epoch() -> None:
    st.session_state[WIDGET_EPOCH_KEY] = st.session_state.get(WIDGET_EPOCH_KEY, 0) + 1


def _store_selection(engine: SelectionEngine) -> None:
    st.session_state[SELECTION_KEY] = engine.selection
    _bump_widget_epoch()
    logger.info(
        "Selection set to %s=%s (%s rows)",
        engine.selection.kind,
        engine.selection.value,
        len(engine.visible()),
    )


def _first_point(event: Any) -> dict[str, Any] | None:
    if event is None:
        return None
    try:
        points = event["selection"]["points"]
    except (KeyError, TypeError):
        return None
    if not points:
        return None
    return points[0]


def clicked_location(event: Any) -> str | None:
    point = _first_point(event)
    if point is None:
        return None
    location = point.get("location")
    if location:
        return str(location)
    return clicked_customdata(event)


def clicked_customdata(event: Any) -> str | None:
    point = _first_point(event)
    if point is None:
        return None
    customdata = point.get("customdata")
    if isinstance(customdata, (list, tuple)):
        customdata = customdata[0] if customdata else None
    return str(customdata) if customdata else None


def selected_row_index(event: Any) -> int | None:
    if event is None:
        return None
    try:
        rows = event["selection"]["rows"]
    except (KeyError, TypeError):
        return None
    return int(rows[0]) if rows else None


def apply_map_click(engine: SelectionEngine, event: Any) -> bool:
    province = clicked_location(event)
    if province is None:
        return False
    engine.select_province(province)
    return True


def apply_instrument_click(engine: SelectionEngine, event: Any) -> None:
    code = clicked_customdata(event)
    if code is None:
        # click on empty chart area resets the table
        engine.clear()
    else:
        engine.select_instrument(code)


def clicked_policy_id(event: Any, policy_ids: list[str]) -> str | None:
    index = selected_row_index(event)
    if index is None or not 0 <= index < len(policy_ids):
        return None
    return policy_ids[index]


def on_map_select(key: str) -> None:
    engine = build_engine()
    if apply_map_click(engine, st.session_state.get(key)):
        _store_selection(engine)


def on_instrument_select(key: str) -> None:
    engine = build_engine()
    apply_instrument_click(engine, st.session_state.get(key))
    _store_selection(engine)


def clear_selection() -> None:
    engine = build_engine()
    engine.clear()
    _store_selection(engine)


def on_table_select(key: str, policy_ids: list[str]) -> None:
    policy_id = clicked_policy_id(st.session_state.get(key), policy_ids)
    if policy_id is None:
        return
    st.session_state[OPEN_POLICY_KEY] = policy_id
    _bump_widget_epoch()


def pop_open_policy_id() -> str | None:
    return st.session_state.pop(OPEN_POLICY_KEY, None)
