"""
Move Statistics Charts - time series, move summary and destination heatmap.

Two coordinated panels driven by the sidebar filters:
- left: selected series over the visible plies (stacked, normalized or lines)
- right: how often each square was a destination at the chosen move

Every rerun rebuilds the DataView from the raw blob; nothing is mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import plotly.express as px
import streamlit as st

from gambit.views import (
    AggregationMode,
    DataSource,
    DataView,
    GraphType,
    Tier,
    chart_title,
    default_window,
    extract_heatmap,
    extract_time_series,
    heatmap_frame,
    selection_limit,
    summarize_at,
    to_frame,
)

SOURCE_LABELS = {
    DataSource.PIECE_TYPE: "Piece type",
    DataSource.ROWS: "Row",
    DataSource.COLUMNS: "Column",
    DataSource.DESTINATION: "Destination",
}

GRAPH_LABELS = {
    GraphType.NORMALIZED_STACKED: "Normalized stacked",
    GraphType.STACKED: "Stacked",
    GraphType.LINE: "Line",
}

COLOR_LABELS = {
    AggregationMode.SEPARATE: "Both players, separate moves",
    AggregationMode.AGGREGATED: "Both players, combined per round",
    AggregationMode.WHITE: "White only",
    AggregationMode.BLACK: "Black only",
}

SOURCE_DESCRIPTIONS = {
    DataSource.PIECE_TYPE: "Which piece was moved at each turn. Castling is counted on its own, not as a king move.",
    DataSource.ROWS: "Which row (rank 1-8) the moved piece landed on.",
    DataSource.COLUMNS: "Which column (file a-h) the moved piece landed on.",
    DataSource.DESTINATION: "Which square the moved piece landed on. Pick up to 10 squares.",
}

FILTER_TITLES = {
    DataSource.PIECE_TYPE: "Filter by Pieces:",
    DataSource.ROWS: "Filter by Rows:",
    DataSource.COLUMNS: "Filter by Columns:",
    DataSource.DESTINATION: "Filter by Destinations (Max 10):",
}


@dataclass
class ChartFilters:
    """Sidebar selections for one rerun."""
    source: DataSource = DataSource.PIECE_TYPE
    graph_type: GraphType = GraphType.NORMALIZED_STACKED
    tier: Tier = Tier.ALL
    aggregation: AggregationMode = AggregationMode.SEPARATE
    selected: List[str] = field(default_factory=list)
    current_ply: int = 10


def render_filters() -> ChartFilters:
    """Source, graph type, rating tier and color controls."""
    st.sidebar.header("Data")
    source = st.sidebar.selectbox(
        "Data source",
        list(DataSource),
        format_func=lambda s: SOURCE_LABELS[s],
        key="data_source",
    )
    st.sidebar.caption(SOURCE_DESCRIPTIONS[source])

    graph_type = st.sidebar.selectbox(
        "Graph type",
        list(GraphType),
        format_func=lambda g: GRAPH_LABELS[g],
        key="graph_type",
    )
    tier = st.sidebar.radio("Rating", list(Tier), format_func=lambda t: t.label, key="tier")
    aggregation = st.sidebar.radio(
        "Moves by",
        list(AggregationMode),
        format_func=lambda a: COLOR_LABELS[a],
        key="aggregation",
    )
    return ChartFilters(source=source, graph_type=graph_type, tier=tier, aggregation=aggregation)


def render_series_picker(view: DataView, filters: ChartFilters) -> None:
    """Series checklist; switching source starts from an empty selection."""
    options = view.labels(filters.source)
    filters.selected = st.sidebar.multiselect(
        FILTER_TITLES[filters.source],
        options,
        max_selections=selection_limit(filters.source),
        key=f"selected_{filters.source.value}",
    )


def render_move_slider(filters: ChartFilters) -> None:
    start, end = default_window(filters.aggregation)
    filters.current_ply = st.slider(
        "Move",
        min_value=start,
        max_value=end - 1,
        value=min(max(filters.current_ply, start), end - 1),
        key=f"move_{filters.aggregation.value}",
    )


def render_time_series(view: DataView, filters: ChartFilters) -> None:
    start, end = default_window(filters.aggregation)
    st.subheader(chart_title(filters.source, filters.graph_type))

    if not filters.selected:
        st.info("Select at least one series in the sidebar.")
        return

    frame = to_frame(view, filters.source, filters.selected, start, end)
    if filters.graph_type is GraphType.NORMALIZED_STACKED:
        st.area_chart(frame, stack="normalize")
    elif filters.graph_type is GraphType.STACKED:
        st.area_chart(frame, stack=True)
    elif filters.graph_type is GraphType.LINE:
        st.line_chart(frame)
    else:
        raise ValueError(f'Invalid graphType "{filters.graph_type}"!')


def render_summary(view: DataView, filters: ChartFilters) -> None:
    start, end = default_window(filters.aggregation)
    st.markdown(f"#### Move {filters.current_ply} Summary")
    data = extract_time_series(view, filters.source, filters.selected, start, end, filters.graph_type)
    for name, text in summarize_at(data, filters.current_ply, filters.graph_type):
        st.write(f"{name}: {text}")


def render_heatmap(view: DataView, filters: ChartFilters) -> None:
    st.subheader(f"Frequency of Destinations at Move {filters.current_ply}")
    board = heatmap_frame(extract_heatmap(view, filters.current_ply))
    fig = px.imshow(
        board,
        color_continuous_scale="Inferno",
        labels={"x": "Column", "y": "Row", "color": "Count"},
        aspect="equal",
    )
    st.plotly_chart(fig, use_container_width=True)
