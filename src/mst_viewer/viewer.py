"""Plotly-based rendering of scatter plots with MST edge overlays."""

import logging
from typing import Any, Callable, Mapping, Sequence

import numpy as np
import plotly.graph_objects as go

from src.mst_viewer.layer import ColumnData, Layer, stat_mst
from src.mst_viewer.stat import SegmentTable

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Minimum Spanning Tree"
DEFAULT_POINT_COLOR = "rgb(65, 105, 225)"  # Royal blue
DEFAULT_EDGE_COLOR = "rgb(150, 150, 150)"
DEFAULT_LINE_WIDTH = 2
DEFAULT_CURVATURE = 0.5
DEFAULT_CURVE_POINTS = 20

# Linetype name -> Plotly dash style ("blank" is not drawn)
DASH_STYLES = {
    "solid": "solid",
    "dashed": "dash",
    "dotted": "dot",
    "dotdash": "dashdot",
    "longdash": "longdash",
    "twodash": "longdashdot",
}

Coordinates = tuple[list[float | None], list[float | None]]


def _segment_coordinates(segments: SegmentTable, params: Mapping[str, Any]) -> Coordinates:
    """Straight lines with None separators between segments."""
    x: list[float | None] = []
    y: list[float | None] = []

    for x0, y0, x1, y1 in segments.rows():
        x.extend([x0, x1, None])
        y.extend([y0, y1, None])

    return x, y


def curve_points(
    start: tuple[float, float],
    end: tuple[float, float],
    curvature: float = DEFAULT_CURVATURE,
    n_points: int = DEFAULT_CURVE_POINTS,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Sample a quadratic Bezier curve between two points.

    The control point sits ``curvature`` segment lengths from the midpoint,
    perpendicular to the segment. Positive curvature bends to the right of
    the start -> end direction, negative to the left, 0 is a straight line.

    Raises:
        ValueError: If start and end are the same point
    """
    x0, y0 = start
    x1, y1 = end
    if x0 == x1 and y0 == y1:
        raise ValueError("end points must not be identical")
    if n_points < 2:
        raise ValueError(f"curve_points must be at least 2, got {n_points}")

    dx = x1 - x0
    dy = y1 - y0
    control_x = (x0 + x1) / 2 + curvature * dy
    control_y = (y0 + y1) / 2 - curvature * dx

    t = np.linspace(0.0, 1.0, n_points)
    x = (1 - t) ** 2 * x0 + 2 * (1 - t) * t * control_x + t ** 2 * x1
    y = (1 - t) ** 2 * y0 + 2 * (1 - t) * t * control_y + t ** 2 * y1
    return x, y


def _curve_coordinates(segments: SegmentTable, params: Mapping[str, Any]) -> Coordinates:
    """Curved lines with None separators between curves."""
    curvature = float(params.get("curvature", DEFAULT_CURVATURE))
    n_points = int(params.get("curve_points", DEFAULT_CURVE_POINTS))

    x: list[float | None] = []
    y: list[float | None] = []

    for x0, y0, x1, y1 in segments.rows():
        curve_x, curve_y = curve_points((x0, y0), (x1, y1), curvature, n_points)
        x.extend(float(v) for v in curve_x)
        x.append(None)
        y.extend(float(v) for v in curve_y)
        y.append(None)

    return x, y


GEOMS: dict[str, Callable[[SegmentTable, Mapping[str, Any]], Coordinates]] = {
    "segment": _segment_coordinates,
    "curve": _curve_coordinates,
}


def line_style(params: Mapping[str, Any]) -> dict[str, Any]:
    """Translate layer parameters into a Plotly line dict."""
    linetype = params.get("linetype", "solid")
    color = params.get("colour", params.get("color", DEFAULT_EDGE_COLOR))
    width = params.get("linewidth", params.get("size", DEFAULT_LINE_WIDTH))

    return dict(
        color=color,
        width=width,
        dash=DASH_STYLES.get(linetype, "solid"),
    )


def _split_by_group(segments: SegmentTable) -> list[tuple[Any, SegmentTable]]:
    if segments.group is None:
        return [(None, segments)]

    parts = []
    for value in dict.fromkeys(segments.group):
        mask = segments.group == value
        parts.append((value, SegmentTable(
            x=segments.x[mask],
            y=segments.y[mask],
            xend=segments.xend[mask],
            yend=segments.yend[mask],
        )))
    return parts


def _add_layer_to_figure(
    fig: go.Figure,
    layer: Layer,
    segments: SegmentTable,
    show_legend: bool,
) -> None:
    """Add one trace per group of the layer's segments."""
    try:
        to_coordinates = GEOMS[layer.geom]
    except KeyError:
        raise ValueError(
            f"Unknown geom '{layer.geom}'. Available: {', '.join(sorted(GEOMS))}"
        ) from None

    if layer.params.get("linetype") == "blank":
        logger.debug(f"Skipping {layer.name} layer with blank linetype")
        return

    style = line_style(layer.params)
    opacity = layer.params.get("alpha", 1.0)

    for group, group_segments in _split_by_group(segments):
        x, y = to_coordinates(group_segments, layer.params)
        name = "MST edges" if group is None else f"MST edges ({group})"
        fig.add_trace(
            go.Scatter(
                x=x,
                y=y,
                mode="lines",
                line=style,
                opacity=opacity,
                hoverinfo="skip",
                name=name,
                showlegend=show_legend,
            )
        )


def _add_points_to_figure(
    fig: go.Figure,
    x: np.ndarray,
    y: np.ndarray,
    color: str,
    marker_size: int,
) -> None:
    """Add the scatter of points with coordinate hover text."""
    hover_texts = [
        f"<b>Point {i}</b><br>Position: ({px:.2f}, {py:.2f})"
        for i, (px, py) in enumerate(zip(x, y), start=1)
    ]

    fig.add_trace(
        go.Scatter(
            x=x,
            y=y,
            mode="markers",
            marker=dict(size=marker_size, color=color, opacity=0.9),
            hovertext=hover_texts,
            hoverinfo="text",
            name="Points",
        )
    )


def _point_source(
    data: ColumnData | None,
    mapping: Mapping[str, str],
    layers: Sequence[Layer],
) -> tuple[ColumnData | None, str, str]:
    """
    Find the data and x/y columns to draw points from.

    The plot data and mapping are tried first, then each layer's data
    (or the plot data) with the layer's resolved mapping.

    Returns:
        (data, x_column, y_column); data is None if no candidate holds
        both columns, and the columns are then the plot mapping's
    """
    candidates = [(data, mapping)]
    for layer in layers:
        layer_data = layer.data if layer.data is not None else data
        candidates.append((layer_data, layer.resolve_mapping(mapping)))

    for candidate_data, candidate_mapping in candidates:
        if candidate_data is None:
            continue
        x_column = candidate_mapping.get("x", "x")
        y_column = candidate_mapping.get("y", "y")
        if x_column in candidate_data and y_column in candidate_data:
            return candidate_data, x_column, y_column

    return None, mapping.get("x", "x"), mapping.get("y", "y")


def create_figure(
    data: ColumnData | None,
    mapping: Mapping[str, str] | None = None,
    layers: Sequence[Layer] | None = None,
    title: str = DEFAULT_TITLE,
    show_points: bool = True,
    point_size: int = 8,
    point_color: str = DEFAULT_POINT_COLOR,
) -> go.Figure:
    """
    Create a 2D scatter plot with MST edges drawn by each layer.

    Args:
        data: Plot data (column name -> values), may be None if every
            layer carries its own data. Points come from the plot data and
            mapping, or else from the first layer whose data holds its
            mapped x/y columns.
        mapping: Plot aesthetic mapping, e.g. {"x": "lon", "y": "lat",
            "from": "from", "to": "to"}
        layers: Layers to draw; defaults to a single ``stat_mst()``
        title: Figure title
        show_points: Whether to draw the points themselves
        point_size: Marker size for points
        point_color: Marker colour for points

    Returns:
        Plotly Figure object ready for display

    Raises:
        ValueError: If a layer is misconfigured or its data incomplete
        IndexError: If an edge index is out of range
    """
    mapping = dict(mapping or {})
    if layers is None:
        layers = [stat_mst()]

    fig = go.Figure()

    # Edges go first so points are drawn on top of them
    for layer in layers:
        segments = layer.compute(data, mapping)
        _add_layer_to_figure(fig, layer, segments, layer.legend_visible(mapping))
        logger.info(f"Added {len(segments)} edges from {layer.name} ({layer.geom})")

    point_data, x_column, y_column = _point_source(data, mapping, layers)
    if show_points:
        if point_data is None:
            raise ValueError(
                f"Cannot draw points: columns '{x_column}' and '{y_column}' "
                f"not found in the plot or layer data"
            )
        x = np.asarray(point_data[x_column], dtype=float)
        y = np.asarray(point_data[y_column], dtype=float)
        _add_points_to_figure(fig, x, y, color=point_color, marker_size=point_size)

    fig.update_layout(
        title=title,
        xaxis_title=x_column,
        yaxis=dict(title=y_column, scaleanchor="x", scaleratio=1),
        showlegend=True,
        legend=dict(
            yanchor="top",
            y=0.99,
            xanchor="left",
            x=0.01,
        ),
        margin=dict(l=40, r=20, t=80, b=40),
    )

    return fig


def show_figure(fig: go.Figure) -> None:
    """Display figure in browser."""
    fig.show()


def export_html(fig: go.Figure, output_path: str) -> None:
    """Export figure as standalone HTML file."""
    fig.write_html(output_path, include_plotlyjs=True, full_html=True)
