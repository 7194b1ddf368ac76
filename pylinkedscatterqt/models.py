"""Data models for linked scatter plots.

Provides frozen dataclasses for canonical points, trace styling, layout and
plot source configuration. Nothing here depends on Qt so the models can be
used from headless code and tests.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple, Union

# Raw point encodings accepted at the data boundary: an ordered pair/triple
# or a mapping with named fields ("x"/"y" or "a"/"b"/"c").
RawPoint = Union[Sequence[float], Mapping[str, float]]
FieldKeys = Union[str, Sequence[str]]
Range = Tuple[float, float]


@dataclass(frozen=True)
class Point:
    """Canonical 2D position."""

    x: float
    y: float

    @property
    def is_valid(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass(frozen=True)
class TernaryPoint:
    """Canonical ternary composition (components usually sum to 1)."""

    a: float
    b: float
    c: float

    @property
    def is_valid(self) -> bool:
        return all(math.isfinite(v) for v in (self.a, self.b, self.c))


INVALID_POINT = Point(math.nan, math.nan)
INVALID_TERNARY = TernaryPoint(math.nan, math.nan, math.nan)

CanonicalPoint = Union[Point, TernaryPoint]


@dataclass(frozen=True)
class DisplayBounds:
    """Padded axis ranges for a drawn point set."""

    x_range: Range = (-1.0, 1.0)
    y_range: Range = (-1.0, 1.0)


@dataclass(frozen=True)
class MarkerStyle:
    """Style of the primary (all points) trace."""

    size: float = 5.0
    clip_on_axis: bool = False
    hover_template: str = "%{customdata.r}<extra></extra>"


@dataclass(frozen=True)
class HighlightStyle:
    """Style of the highlight overlay marker."""

    size: float = 12.0
    color: str = "white"
    line_width: float = 2.0
    line_color: str = "black"


@dataclass(frozen=True)
class TernaryAxes:
    """Axis titles for ternary plots (quartz / alkali feldspar / plagioclase)."""

    a_title: str = "Q"
    b_title: str = "A"
    c_title: str = "P"
    total: float = 1.0


@dataclass(frozen=True)
class PlotLayout:
    """Layout knobs shared by every surface.

    Attributes:
        height: Plot height in pixels.
        width: Fixed width in pixels, or ``None`` to let the surface size itself.
        margin: (left, right, top, bottom) margins in pixels.
        show_axes: Whether cartesian axes are visible.
        display_mode_bar: Whether the renderer shows its tool bar.
    """

    height: int = 450
    width: Optional[int] = None
    margin: Tuple[int, int, int, int] = (10, 10, 40, 10)
    ternary_margin: Tuple[int, int, int, int] = (35, 35, 0, 0)
    show_axes: bool = False
    display_mode_bar: bool = False


@dataclass(frozen=True)
class PlotSourceConfig:
    """Everything a controller needs to know about one plot surface.

    Attributes:
        surface_id: Identifier of the rendering surface (element id).
        location: URL or path of the JSON document feeding this plot.
        coords_key: Coordinate field name, or a list of names to concatenate.
        color_key: Category label field name, or a list of names.
        title: Base plot title. Grid plots append the resolved key.
        kind: ``"scatter"`` or ``"ternary"``.
        grid_field: Name of the parameter grid mapping in the document, or
            ``None`` for plots drawn from top-level fields.
        param_key_fn: Optional callable picking a grid key from the fetched
            document (used by paired plots instead of slider controls).
    """

    surface_id: str
    location: str
    coords_key: FieldKeys = "coords"
    color_key: FieldKeys = "labels"
    title: str = ""
    kind: str = "scatter"
    grid_field: Optional[str] = None
    param_key_fn: Optional[Callable[[Any], Optional[str]]] = None
    marker: MarkerStyle = MarkerStyle()
    highlight: HighlightStyle = HighlightStyle()
    ternary_axes: TernaryAxes = TernaryAxes()
    layout: PlotLayout = PlotLayout()

    def __post_init__(self) -> None:
        if self.kind not in ("scatter", "ternary"):
            raise ValueError(f"Unsupported plot kind: {self.kind!r}")

    @property
    def is_ternary(self) -> bool:
        return self.kind == "ternary"


@dataclass(frozen=True)
class HoverSyncOptions:
    """Hover synchronization settings.

    ``throttle_ms`` is the minimum interval between two processed hover
    notifications on one link. Unhover is never throttled.
    """

    throttle_ms: float = 250.0
    primary_trace: int = 0
    overlay_trace: int = 1


@dataclass
class HoverSyncStats:
    """Counters for hover traffic on a registry."""

    processed: int = 0
    dropped: int = 0
    cleared: int = 0
    ignored: int = 0
    last_index: Optional[int] = None

    def record_processed(self, index: int) -> None:
        self.processed += 1
        self.last_index = index

    def record_dropped(self) -> None:
        self.dropped += 1

    def record_cleared(self) -> None:
        self.cleared += 1
        self.last_index = None
