from __future__ import annotations

import os

import streamlit as st

from gambit.config import get_settings, setup_logging
from gambit.etl.serializer import Blob, load_blob
from gambit.views import EventsIndex, build_view
from ui.charts import (
    render_filters,
    render_heatmap,
    render_move_slider,
    render_series_picker,
    render_summary,
    render_time_series,
)

BASE_DIR = os.path.dirname(__file__)


def _blob_path() -> str:
    path = get_settings().output_path
    return path if os.path.isabs(path) else os.path.join(BASE_DIR, path)


# Snapshot written by `python main.py`; loaded once and never changed
@st.cache_data(show_spinner=False)
def load_events(path: str) -> Blob:
    return load_blob(path)


def main() -> None:
    setup_logging(get_settings().log_level)
    st.set_page_config(page_title="Gambit: Moves Over Time", layout="wide")
    st.title("What Gets Moved, and Where, Over a Game")

    path = _blob_path()
    if not os.path.exists(path):
        st.error(f"No aggregated data at {path}. Run `python main.py` first.")
        st.stop()

    index = EventsIndex(load_events(path))

    filters = render_filters()
    view = build_view(index, filters.tier, filters.aggregation)
    render_series_picker(view, filters)
    render_move_slider(filters)

    left, right = st.columns([3, 2])
    with left:
        render_time_series(view, filters)
        render_summary(view, filters)
    with right:
        render_heatmap(view, filters)


if __name__ == "__main__":
    main()
