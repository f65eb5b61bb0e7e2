# gambit/views.py
"""Front-end data model: chartable series rebuilt from the blob.

The blob is loaded once and never changed. Every filter change (rating
tier, color mode) derives a brand-new DataView from it with `build_view`,
so there is no cached view to fall out of date.

Row and column series are not stored in the blob. They are summed from
the 64 per-cell counters whose names match the selected tier exactly,
e.g. row "4" at the low tier sums "pos_a4_low" ... "pos_h4_low".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

import chess
import pandas as pd

from .etl.aggregator import HIGH_SUFFIX, LOW_SUFFIX, MID_SUFFIX, position_key
from .etl.codec import CELLS
from .etl.serializer import EVENTS_KEY, Blob

# At most this many destinations can be charted at once
MAX_DESTINATION_SELECTIONS = 10


class AggregationMode(str, Enum):
    SEPARATE = "separate"      # every ply
    AGGREGATED = "aggregated"  # white + black move of each round
    WHITE = "white"            # even plies
    BLACK = "black"            # odd plies


class DataSource(str, Enum):
    PIECE_TYPE = "pieceType"
    ROWS = "rows"
    COLUMNS = "columns"
    DESTINATION = "destination"


class GraphType(str, Enum):
    NORMALIZED_STACKED = "normalizedStacked"
    STACKED = "stacked"
    LINE = "line"


class Tier(str, Enum):
    ALL = ""
    LOW = LOW_SUFFIX
    MID = MID_SUFFIX
    HIGH = HIGH_SUFFIX

    @property
    def label(self) -> str:
        return _TIER_LABELS[self]


_TIER_LABELS = {
    Tier.ALL: "All ratings",
    Tier.LOW: "Low (< 1225)",
    Tier.MID: "Mid (1225-1874)",
    Tier.HIGH: "High (1875+)",
}

# Display name -> counter prefix, in legend order
PIECE_SERIES: tuple[tuple[str, str], ...] = (
    ("King", "king"),
    ("Pawn", "pawn"),
    ("Rook", "rook"),
    ("Castling", "castling"),
    ("Queen", "queen"),
    ("Bishop", "bishop"),
    ("Knight", "knight"),
)

SOURCE_TEXT = {
    DataSource.PIECE_TYPE: "Piece Types Moved",
    DataSource.ROWS: "Piece Placement on Rows",
    DataSource.COLUMNS: "Piece Placement on Columns",
    DataSource.DESTINATION: "Piece Placement on Destinations",
}


class Series:
    """Named per-ply counts; out-of-range plies read as 0."""

    def __init__(self, name: str, data: Iterable[int] = ()):
        self.name = name
        self.data = list(data)

    def count(self, n: int, times: int) -> None:
        """Add `times` at ply `n`, growing the series as needed."""
        if n >= len(self.data):
            self.data.extend([0] * (n + 1 - len(self.data)))
        self.data[n] += times

    def get(self, n: int) -> int:
        if n < 0 or n >= len(self.data):
            return 0
        return self.data[n]

    def last_index(self) -> int:
        return len(self.data) - 1

    def __len__(self) -> int:
        return len(self.data)

    def domain(self, low: int, high: int) -> list[dict[str, int]]:
        """[{"ply": p, "value": count}] for p in [low, high)."""
        return [{"ply": p, "value": self.get(p)} for p in range(low, high)]

    def aggregate_by(self, aggregation: AggregationMode | str) -> "Series":
        """Re-bucket in place by color; returns self.

        Ply 0 is white's first move, so white owns the even plies.
        """
        mode = AggregationMode(aggregation)
        if mode is AggregationMode.AGGREGATED:
            # An unpaired trailing white move is dropped
            self.data = [self.data[i] + self.data[i + 1] for i in range(0, len(self.data) - 1, 2)]
        elif mode is AggregationMode.WHITE:
            self.data = self.data[0::2]
        elif mode is AggregationMode.BLACK:
            self.data = self.data[1::2]
        return self

    def __repr__(self) -> str:
        return f"Series({self.name!r}, len={len(self.data)})"


class EventsIndex:
    """Read-only name lookup over a loaded blob."""

    def __init__(self, blob: Blob):
        self._entries: list[dict[str, Any]] = list(blob[EVENTS_KEY])
        self._by_name = {entry["name"]: entry["data"] for entry in self._entries}

    def names(self) -> list[str]:
        return [entry["name"] for entry in self._entries]

    def lookup(self, key: str, aggregation: AggregationMode | str = AggregationMode.SEPARATE) -> Series:
        """Copy of the named series, re-bucketed by `aggregation`.

        An unknown key means the blob and the UI disagree, so it raises.
        """
        if key not in self._by_name:
            raise KeyError(f"Key {key} not found!")
        return Series(key, self._by_name[key]).aggregate_by(aggregation)

    def sum_by_pattern(
        self,
        label: str,
        predicate: Callable[[str], bool],
        aggregation: AggregationMode | str = AggregationMode.SEPARATE,
    ) -> Series:
        """Element-wise sum of every raw series whose name satisfies `predicate`."""
        result = Series(label)
        for entry in self._entries:
            if predicate(entry["name"]):
                for idx, n in enumerate(entry["data"]):
                    result.count(idx, n)
        return result.aggregate_by(aggregation)

    def sum_row(self, row: str, suffix: str, aggregation: AggregationMode | str) -> Series:
        pattern = re.compile(rf"^pos_[a-h]([1-8]){re.escape(suffix)}$")

        def matches(key: str) -> bool:
            match = pattern.match(key)
            return match is not None and match.group(1) == row

        return self.sum_by_pattern(f"row_{row}", matches, aggregation)

    def sum_col(self, col: str, suffix: str, aggregation: AggregationMode | str) -> Series:
        pattern = re.compile(rf"^pos_([a-h])[1-8]{re.escape(suffix)}$")

        def matches(key: str) -> bool:
            match = pattern.match(key)
            return match is not None and match.group(1) == col

        return self.sum_by_pattern(f"col_{col}", matches, aggregation)


@dataclass(frozen=True)
class LabeledSeries:
    name: str
    data: Series


@dataclass(frozen=True)
class DataView:
    """Every chartable series for one (tier, color mode) choice."""
    tier: Tier
    aggregation: AggregationMode
    sources: Mapping[DataSource, tuple[LabeledSeries, ...]]

    def __getitem__(self, source: DataSource | str) -> tuple[LabeledSeries, ...]:
        return self.sources[DataSource(source)]

    def labels(self, source: DataSource | str) -> list[str]:
        return [item.name for item in self[source]]


def cell_name(i: int) -> str:
    """0 -> "a1", 1 -> "a2", ..., 8 -> "b1", ..., 63 -> "h8"."""
    return CELLS[i]


def build_view(index: EventsIndex, tier: Tier | str, aggregation: AggregationMode | str) -> DataView:
    tier = Tier(tier)
    aggregation = AggregationMode(aggregation)
    suffix = tier.value

    sources = {
        DataSource.PIECE_TYPE: tuple(
            LabeledSeries(label, index.lookup(prefix + suffix, aggregation))
            for label, prefix in PIECE_SERIES
        ),
        DataSource.ROWS: tuple(
            LabeledSeries(r, index.sum_row(r, suffix, aggregation)) for r in chess.RANK_NAMES
        ),
        DataSource.COLUMNS: tuple(
            LabeledSeries(c, index.sum_col(c, suffix, aggregation)) for c in chess.FILE_NAMES
        ),
        DataSource.DESTINATION: tuple(
            LabeledSeries(cell, index.lookup(position_key(cell, suffix), aggregation))
            for cell in CELLS
        ),
    }
    return DataView(tier=tier, aggregation=aggregation, sources=sources)


def default_window(aggregation: AggregationMode | str) -> tuple[int, int]:
    """Visible ply range; combined or single-color modes halve the axis."""
    if AggregationMode(aggregation) is AggregationMode.SEPARATE:
        return 0, 200
    return 0, 100


def selection_limit(source: DataSource | str) -> Optional[int]:
    if DataSource(source) is DataSource.DESTINATION:
        return MAX_DESTINATION_SELECTIONS
    return None


def chart_title(source: DataSource | str, graph_type: GraphType | str) -> str:
    text = SOURCE_TEXT[DataSource(source)]
    if GraphType(graph_type) is GraphType.NORMALIZED_STACKED:
        return f"Relative Frequency of {text} at each Turn"
    return f"Frequency of {text} at each Turn"


def _selected(view: DataView, source: DataSource | str, selected: Iterable[str]) -> list[LabeledSeries]:
    wanted = set(selected)
    return [item for item in view[source] if item.name in wanted]


def extract_time_series(
    view: DataView,
    source: DataSource | str,
    selected: Iterable[str],
    start: int,
    end: int,
    graph_type: GraphType | str,
) -> list[dict[str, Any]]:
    """Selected series over [start, end) as [{"name", "values": [{x, y, y0}]}].

    Stacked types carry each band's baseline in y0 and its top in y;
    normalized stacking scales every ply's column to sum to 1.
    """
    graph_type = GraphType(graph_type)
    data = [
        {
            "name": item.name,
            "values": [{"x": d["ply"], "y": d["value"], "y0": 0} for d in item.data.domain(start, end)],
        }
        for item in _selected(view, source, selected)
    ]
    if not data or graph_type is GraphType.LINE:
        return data

    for i in range(end - start):
        y0 = 0
        for series in data:
            point = series["values"][i]
            point["y0"] = y0
            y0 += point["y"]
            point["y"] = y0
        if y0 != 0 and graph_type is GraphType.NORMALIZED_STACKED:
            for series in data:
                point = series["values"][i]
                point["y0"] /= y0
                point["y"] /= y0

    return data


def summarize_at(series_data: Sequence[Mapping[str, Any]], ply: int, graph_type: GraphType | str) -> list[tuple[str, str]]:
    """(name, text) per series for the "Move N Summary" panel."""
    graph_type = GraphType(graph_type)
    rows: list[tuple[str, str]] = []
    for series in series_data:
        point = next((v for v in series["values"] if v["x"] == ply), None)
        if point is None:
            continue
        height = point["y"] - point["y0"]
        if graph_type is GraphType.NORMALIZED_STACKED:
            text = f"{height * 100:.1f}%"
        elif graph_type is GraphType.STACKED:
            text = str(round(height))
        else:
            text = str(point["y"])
        rows.append((series["name"], text))
    return rows


def extract_heatmap(view: DataView, ply: int) -> list[dict[str, Any]]:
    """[{"x": file, "y": rank, "value": count at ply}] for all 64 cells."""
    return [
        {"x": item.name[0], "y": item.name[1], "value": item.data.get(ply)}
        for item in view[DataSource.DESTINATION]
    ]


def to_frame(view: DataView, source: DataSource | str, selected: Iterable[str], start: int, end: int) -> pd.DataFrame:
    """Raw counts, one column per selected series, indexed by ply."""
    columns = {item.name: [item.data.get(p) for p in range(start, end)] for item in _selected(view, source, selected)}
    frame = pd.DataFrame(columns, index=pd.RangeIndex(start, end, name="Move"))
    return frame


def heatmap_frame(cells: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    """Board-shaped frame: rank 8 on top, files a-h left to right."""
    df = pd.DataFrame(cells)
    if df.empty:
        return pd.DataFrame(index=list(reversed(chess.RANK_NAMES)), columns=list(chess.FILE_NAMES))
    board = df.pivot(index="y", columns="x", values="value")
    return board.reindex(index=list(reversed(chess.RANK_NAMES)), columns=list(chess.FILE_NAMES)).fillna(0)
