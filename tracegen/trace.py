"""Span records produced by the trace simulator.

A trace is a small forest of :class:`Span` trees. Times are relative to the
start of the trace, in the same unit as the simulation ``duration``.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Core data structures
# ---------------------------------------------------------------------------


@dataclass
class Span:
    """One timed call frame.

    ``relative_end_time`` stays ``None`` until the frame is popped off the
    simulated call stack.
    """

    name: str
    relative_start_time: float
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[Span] = field(default_factory=list)
    relative_end_time: float | None = None

    def close(self, time: float) -> None:
        """Set the end time of the span."""
        self.relative_end_time = time

    def to_dict(self) -> dict[str, Any]:
        """Render the span subtree as plain JSON-compatible data."""
        return {
            "name": self.name,
            "relativeStartTime": self.relative_start_time,
            "relativeEndTime": self.relative_end_time,
            "attributes": dict(self.attributes),
            "children": [child.to_dict() for child in self.children],
        }


Trace = list[Span]


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------


def iter_spans(trace: Trace) -> Iterator[Span]:
    """Yield every span of the forest, parents before children."""
    for span in trace:
        yield span
        yield from iter_spans(span.children)


def span_count(trace: Trace) -> int:
    """Total number of spans in the forest."""
    return sum(1 for _ in iter_spans(trace))


def trace_depth(trace: Trace) -> int:
    """Length of the longest root-to-leaf chain."""
    if not trace:
        return 0
    return 1 + max(trace_depth(span.children) for span in trace)


def trace_to_dicts(trace: Trace) -> list[dict[str, Any]]:
    """Render the whole forest for JSON output."""
    return [span.to_dict() for span in trace]
