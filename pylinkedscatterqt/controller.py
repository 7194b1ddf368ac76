"""Plot controllers.

A controller owns one or two rendering surfaces. Drawing pulls normalized
coordinates and category colors from the fetched document (through the
parameter grid when the plot is grid-parameterized) and hands primary and
overlay traces to the rendering backend. Highlighting only restyles the
overlay trace.

Each surface goes through two states:

    UNINITIALIZED --(first successful draw)--> READY

The first draw creates the surface (``new_plot``); every later draw updates it
in place (``react``) so the backend keeps its interaction state.

Typical usage:

    context = PlotContext(backend)
    ternary = SinglePlot(PlotSourceConfig("qap", "qap.json", kind="ternary"), context)
    umap = SinglePlot(
        PlotSourceConfig("umap", "umap.json", coords_key="embedding",
                         color_key="rocktype", grid_field="projections"),
        context,
    )
    ternary.load()
    umap.load()
    context.hover_sync.register_and_link(PlotLink([ternary, umap]))
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Hashable, List, Mapping, Optional, Sequence, Tuple

from .colors import (
    DEFAULT_LABEL_STRATEGIES,
    PLACEHOLDER_LABEL,
    LabelStrategy,
    assign_colors,
    resolve_labels,
)
from .context import PlotContext
from .grid import DEFAULT_GRID_FIELD, GridResolution, ParameterGrid
from .controls import GridSelection
from .models import CanonicalPoint, PlotSourceConfig
from .normalize import (
    compute_display_bounds,
    has_block,
    merge_sequences,
    to_canonical_point,
    to_ternary_point,
)
from .traces import (
    empty_overlay_update,
    overlay_update,
    plot_config,
    scatter_layout,
    scatter_traces,
    ternary_layout,
    ternary_traces,
)

logger = logging.getLogger(__name__)

TITLE_SEPARATOR = " — "


class DatasetShapeError(ValueError):
    """Raised when a document has no addressable coordinate field."""


class PlotState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


@dataclass
class PlotEntity:
    """State of one rendering surface.

    Attributes:
        config: Source and styling configuration.
        initialized: False until the first successful draw.
        data: Last fetched document.
        points: Points of the last draw, indexed by row.
        labels: Category label per row of the last draw.
        colors: Color per row of the last draw.
        title: Title of the last draw.
        resolution: Grid key resolution of the last draw, if any.
        label_source: Name of the label strategy used by the last draw.
    """

    config: PlotSourceConfig
    initialized: bool = False
    data: Any = None
    points: List[CanonicalPoint] = field(default_factory=list)
    labels: Tuple[Hashable, ...] = ()
    colors: Tuple[str, ...] = ()
    title: str = ""
    resolution: Optional[GridResolution] = None
    label_source: Optional[str] = None

    @property
    def surface_id(self) -> str:
        return self.config.surface_id

    @property
    def state(self) -> PlotState:
        return PlotState.READY if self.initialized else PlotState.UNINITIALIZED

    @property
    def is_ternary(self) -> bool:
        return self.config.is_ternary


def _align_labels(labels: Sequence[Hashable], count: int, surface_id: str) -> List[Hashable]:
    """Make the label list exactly one label per row."""
    labels = list(labels)
    if not labels or len(labels) == count:
        return labels
    logger.warning(
        "%s: %d labels for %d points; padding/truncating to match",
        surface_id,
        len(labels),
        count,
    )
    if len(labels) > count:
        return labels[:count]
    return labels + [PLACEHOLDER_LABEL] * (count - len(labels))


def _titled(base: str, key: Optional[str]) -> str:
    if not key:
        return base
    if not base:
        return key
    return f"{base}{TITLE_SEPARATOR}{key}"


class _PlotController:
    """Drawing and highlighting shared by the single and paired controllers."""

    def __init__(
        self,
        context: PlotContext,
        label_strategies: Sequence[LabelStrategy] = DEFAULT_LABEL_STRATEGIES,
    ) -> None:
        self._context = context
        self._label_strategies: Tuple[LabelStrategy, ...] = tuple(label_strategies)

    @property
    def context(self) -> PlotContext:
        return self._context

    def _fetch(self, entity: PlotEntity) -> None:
        entity.data = self._context.fetch(entity.config.location)

    def _draw_entity(
        self,
        entity: PlotEntity,
        slice_: Optional[Any] = None,
        key: Optional[str] = None,
    ) -> None:
        cfg = entity.config
        source = slice_ if slice_ is not None else entity.data
        if not has_block(source, cfg.coords_key):
            raise DatasetShapeError(
                f"{cfg.surface_id}: no coordinate field {cfg.coords_key!r}"
                + (f" in grid slice {key!r}" if key else "")
            )

        convert = to_ternary_point if cfg.is_ternary else to_canonical_point
        points = merge_sequences(source, cfg.coords_key, convert)

        strategy, labels = resolve_labels(
            self._label_strategies, entity.data, slice_, cfg.color_key
        )
        labels = _align_labels(labels, len(points), cfg.surface_id)
        assignment = assign_colors(labels, fallback_count=len(points))

        title = _titled(cfg.title, key)
        if cfg.is_ternary:
            traces = ternary_traces(
                points, assignment.labels, assignment.colors, cfg.marker, cfg.highlight
            )
            layout = ternary_layout(title, cfg.ternary_axes, cfg.layout)
        else:
            bounds = compute_display_bounds(points)
            traces = scatter_traces(
                points, assignment.labels, assignment.colors, cfg.marker, cfg.highlight
            )
            layout = scatter_layout(title, bounds, cfg.layout)

        entity.points = points
        entity.labels = assignment.labels
        entity.colors = assignment.colors
        entity.title = title
        entity.label_source = strategy

        self._render(entity, traces, layout)

    def _draw_configured(self, entity: PlotEntity) -> None:
        """Draw top-level fields, or the slice picked by ``param_key_fn``."""
        cfg = entity.config
        key = cfg.param_key_fn(entity.data) if cfg.param_key_fn is not None else None
        if not key:
            entity.resolution = None
            self._draw_entity(entity)
            return

        grid_field = cfg.grid_field or DEFAULT_GRID_FIELD
        slices = entity.data.get(grid_field) if isinstance(entity.data, Mapping) else None
        if not isinstance(slices, Mapping) or key not in slices:
            raise DatasetShapeError(f"{cfg.surface_id}: no grid slice {key!r}")
        entity.resolution = GridResolution(key, "exact")
        self._draw_entity(entity, slice_=slices[key], key=key)

    def _render(self, entity: PlotEntity, traces, layout) -> None:
        backend = self._context.backend
        if not entity.initialized:
            logger.debug("%s: new plot (%d points)", entity.surface_id, len(entity.points))
            backend.new_plot(entity.surface_id, traces, layout, plot_config(entity.config.layout))
            entity.initialized = True
        else:
            logger.debug("%s: update (%d points)", entity.surface_id, len(entity.points))
            backend.react(entity.surface_id, traces, layout)

    def _highlight_entity(self, entity: PlotEntity, index: int) -> None:
        if not entity.initialized:
            return
        if 0 <= index < len(entity.points):
            update = overlay_update(entity.points[index])
        else:
            update = empty_overlay_update(entity.is_ternary)
        self._context.backend.restyle(
            entity.surface_id, update, [self._context.options.overlay_trace]
        )

    def _clear_entity(self, entity: PlotEntity) -> None:
        if not entity.initialized:
            return
        self._context.backend.restyle(
            entity.surface_id,
            empty_overlay_update(entity.is_ternary),
            [self._context.options.overlay_trace],
        )


class SinglePlot(_PlotController):
    """Controller for one surface, optionally driven by a parameter grid.

    When ``config.grid_field`` is set the plot draws the grid slice matching
    the ``(n, d)`` pair currently chosen in ``selection`` and redraws whenever
    the selection changes.

    Args:
        config: Plot source configuration.
        context: Session context.
        selection: Parameter selection for grid plots (created if omitted).
        label_strategies: Ordered label lookup policies.
    """

    def __init__(
        self,
        config: PlotSourceConfig,
        context: PlotContext,
        selection: Optional[GridSelection] = None,
        label_strategies: Sequence[LabelStrategy] = DEFAULT_LABEL_STRATEGIES,
    ) -> None:
        super().__init__(context, label_strategies)
        self.entity = PlotEntity(config)
        self.grid: Optional[ParameterGrid] = None
        if selection is None and config.grid_field is not None:
            selection = GridSelection()
        self.selection = selection
        self._subscribed = False

    @property
    def config(self) -> PlotSourceConfig:
        return self.entity.config

    @property
    def surface_ids(self) -> List[str]:
        return [self.entity.surface_id]

    @property
    def state(self) -> PlotState:
        return self.entity.state

    @property
    def is_grid(self) -> bool:
        return self.config.grid_field is not None

    def load(self) -> None:
        """Fetch the document, set up the grid selection and draw.

        Raises:
            DataFetchError: If the document cannot be fetched.
            EmptyGridError: If a grid plot's document has no grid keys.
            DatasetShapeError: If no coordinate field can be addressed.
        """
        self._fetch(self.entity)
        if self.is_grid:
            self.grid = ParameterGrid.from_document(self.entity.data, self.config.grid_field)
            self.selection.configure(self.grid.values)
            if not self._subscribed:
                self.selection.subscribe(self.draw)
                self._subscribed = True
        self.draw()

    def draw(self) -> None:
        if self.entity.data is None:
            raise RuntimeError(f"{self.entity.surface_id}: draw() called before load()")
        if self.grid is None:
            self._draw_configured(self.entity)
            return

        n, d = self.selection.current()
        if n is None or d is None:
            key = self.grid.keys[0]
            logger.warning(
                "%s: grid keys declare no n/d values; drawing %r",
                self.entity.surface_id,
                key,
            )
            resolution = GridResolution(key, "fallback")
        else:
            resolution = self.grid.resolve(n, d)
        self.entity.resolution = resolution
        self._draw_entity(
            self.entity, slice_=self.grid.slice(resolution.key), key=resolution.key
        )

    def highlight(self, index: int) -> None:
        self._highlight_entity(self.entity, index)

    def clear(self) -> None:
        self._clear_entity(self.entity)


class PlotPair(_PlotController):
    """Controller for two surfaces that always co-highlight.

    The pair registers itself with the context's hover registry on
    construction and links its surfaces after the first successful load.
    The right-hand plot may pick a grid slice through ``param_key_fn``.
    """

    def __init__(
        self,
        left: PlotSourceConfig,
        right: PlotSourceConfig,
        context: PlotContext,
        label_strategies: Sequence[LabelStrategy] = DEFAULT_LABEL_STRATEGIES,
    ) -> None:
        super().__init__(context, label_strategies)
        self.left = PlotEntity(left)
        self.right = PlotEntity(right)
        self._linked = False
        context.hover_sync.register_pair(self)

    @property
    def surface_ids(self) -> List[str]:
        return [self.left.surface_id, self.right.surface_id]

    def load(self) -> None:
        """Fetch both documents, draw both surfaces and link hover."""
        self._fetch(self.left)
        self._fetch(self.right)

        self.draw_left()
        self.draw_right()

        if not self._linked:
            self._context.hover_sync.link(self)
            self._linked = True

    def draw_left(self) -> None:
        self._draw_configured(self.left)

    def draw_right(self) -> None:
        self._draw_configured(self.right)

    def redraw(self) -> None:
        self.draw_left()
        self.draw_right()

    def highlight(self, index: int) -> None:
        self._highlight_entity(self.left, index)
        self._highlight_entity(self.right, index)

    def clear(self) -> None:
        self._clear_entity(self.left)
        self._clear_entity(self.right)
