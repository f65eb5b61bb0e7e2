# gambit/etl/counters.py
"""Per-ply event counters.

A Counter records how many times one event (say "a knight moved" or
"a piece landed on e4") happened at each ply across all games. Counters
only grow: entries are incremented, never reset or truncated.
"""

from __future__ import annotations

from typing import Any, Iterator


class Counter:
    """Number of times an event occurred at the nth ply."""

    def __init__(self, name: str):
        self.name = name
        self.data: list[int] = []

    def count(self, n: int, times: int = 1) -> None:
        """Register `times` occurrences at ply `n`, growing the series as needed."""
        if n < 0:
            raise IndexError(f"Negative ply {n} for counter {self.name!r}")
        if n >= len(self.data):
            self.data.extend([0] * (n + 1 - len(self.data)))
        self.data[n] += times

    def get(self, n: int) -> int:
        """Count at ply `n`; 0 for any ply we have never stored."""
        if n < 0 or n >= len(self.data):
            return 0
        return self.data[n]

    def last_index(self) -> int:
        """Highest stored ply, -1 when nothing has been counted."""
        return len(self.data) - 1

    def __len__(self) -> int:
        return len(self.data)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "data": list(self.data)}

    def __repr__(self) -> str:
        return f"Counter({self.name!r}, len={len(self.data)})"


class CounterTable:
    """Counters by name, kept in creation order."""

    def __init__(self) -> None:
        self._counters: dict[str, Counter] = {}

    def add(self, name: str) -> Counter:
        """Create a zeroed counter; adding an existing name is a no-op."""
        counter = self._counters.get(name)
        if counter is None:
            counter = Counter(name)
            self._counters[name] = counter
        return counter

    def __getitem__(self, name: str) -> Counter:
        try:
            return self._counters[name]
        except KeyError:
            raise KeyError(f"Counter {name!r} not found") from None

    def increment(self, name: str, ply: int) -> None:
        self[name].count(ply)

    def get(self, name: str, ply: int) -> int:
        return self[name].get(ply)

    def names(self) -> list[str]:
        return list(self._counters)

    def __contains__(self, name: object) -> bool:
        return name in self._counters

    def __iter__(self) -> Iterator[Counter]:
        return iter(self._counters.values())

    def __len__(self) -> int:
        return len(self._counters)

    def to_list(self) -> list[dict[str, Any]]:
        return [counter.to_dict() for counter in self]
