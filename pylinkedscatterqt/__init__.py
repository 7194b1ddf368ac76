from .models import (
    Point,
    TernaryPoint,
    INVALID_POINT,
    INVALID_TERNARY,
    DisplayBounds,
    MarkerStyle,
    HighlightStyle,
    TernaryAxes,
    PlotLayout,
    PlotSourceConfig,
    HoverSyncOptions,
    HoverSyncStats,
)

from .normalize import (
    to_canonical_point,
    to_ternary_point,
    merge_sequences,
    compute_display_bounds,
    ternary_to_cartesian,
)
from .colors import PALETTE, ColorAssignment, LabelStrategy, assign_colors
from .grid import (
    EmptyGridError,
    GridResolution,
    GridValues,
    ParameterGrid,
    resolve_key,
    make_key_fn,
)
from .rendering import RenderBackend, HoverEvent, HoverPoint
from .loader import DataFetchError, fetch_json
from .throttle import RateLimiter
from .hover_sync import HoverSyncRegistry, PlotLink
from .context import PlotContext
from .controls import ValueSelector, GridSelection
from .controller import (
    SinglePlot,
    PlotPair,
    PlotEntity,
    PlotState,
    DatasetShapeError,
)

# Qt backends and widgets live in submodules so the core imports without Qt:
#   pylinkedscatterqt.web_view.PlotlyWebBackend
#   pylinkedscatterqt.qtgraph_backend.PyQtGraphBackend
#   pylinkedscatterqt.param_slider.ParameterPanel

__all__ = [
    "Point",
    "TernaryPoint",
    "INVALID_POINT",
    "INVALID_TERNARY",
    "DisplayBounds",
    "MarkerStyle",
    "HighlightStyle",
    "TernaryAxes",
    "PlotLayout",
    "PlotSourceConfig",
    "HoverSyncOptions",
    "HoverSyncStats",
    # Normalization + colors
    "to_canonical_point",
    "to_ternary_point",
    "merge_sequences",
    "compute_display_bounds",
    "ternary_to_cartesian",
    "PALETTE",
    "ColorAssignment",
    "LabelStrategy",
    "assign_colors",
    # Parameter grid
    "EmptyGridError",
    "GridResolution",
    "GridValues",
    "ParameterGrid",
    "resolve_key",
    "make_key_fn",
    # Collaborators
    "RenderBackend",
    "HoverEvent",
    "HoverPoint",
    "DataFetchError",
    "fetch_json",
    # Hover sync + controllers
    "RateLimiter",
    "HoverSyncRegistry",
    "PlotLink",
    "PlotContext",
    "ValueSelector",
    "GridSelection",
    "SinglePlot",
    "PlotPair",
    "PlotEntity",
    "PlotState",
    "DatasetShapeError",
]
