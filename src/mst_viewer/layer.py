"""Layer configuration for drawing MST edges over a scatter plot."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

import numpy as np

from src.mst_viewer.stat import (
    PointEdgeTable,
    SegmentTable,
    Stat,
    check_required_aes,
    get_stat,
)

logger = logging.getLogger(__name__)

DEFAULT_GEOM = "segment"
DEFAULT_POSITION = "identity"
DEFAULT_LINETYPE = "dotted"

# Index in this tuple is the integer linetype code (0 = "blank", 3 = "dotted")
LINETYPES = ("blank", "solid", "dashed", "dotted", "dotdash", "longdash", "twodash")

# Extra styling parameters the renderer understands
KNOWN_PARAMS = frozenset({
    "colour",
    "color",
    "linewidth",
    "size",
    "alpha",
    "curvature",
    "curve_points",
})

ColumnData = Mapping[str, Sequence[Any]]


def normalize_linetype(linetype: str | int) -> str:
    """
    Convert a linetype name or integer code to its name.

    Args:
        linetype: Name such as "dashed", or code 0-6 (int or digit string)

    Returns:
        Linetype name from LINETYPES

    Raises:
        ValueError: If the linetype is not recognised
    """
    if isinstance(linetype, str) and linetype.strip().isdigit():
        linetype = int(linetype)

    if isinstance(linetype, int) and not isinstance(linetype, bool):
        if 0 <= linetype < len(LINETYPES):
            return LINETYPES[linetype]
    elif isinstance(linetype, str) and linetype.lower() in LINETYPES:
        return linetype.lower()

    raise ValueError(
        f"Invalid linetype {linetype!r}. Use a code 0-{len(LINETYPES) - 1} "
        f"or one of: {', '.join(LINETYPES)}"
    )


def _position_identity(table: PointEdgeTable) -> PointEdgeTable:
    return table


POSITIONS: dict[str, Callable[[PointEdgeTable], PointEdgeTable]] = {
    "identity": _position_identity,
}


def _is_missing(values: np.ndarray) -> np.ndarray:
    """Boolean mask of NaN/None entries."""
    if values.dtype.kind == "f":
        return np.isnan(values)
    if values.dtype.kind == "O":
        return np.array(
            [v is None or (isinstance(v, float) and np.isnan(v)) for v in values],
            dtype=bool,
        )
    return np.zeros(len(values), dtype=bool)


def remove_missing(
    columns: ColumnData,
    check_columns: Sequence[str],
    na_rm: bool = False,
    layer_name: str = "stat_mst",
) -> dict[str, np.ndarray]:
    """
    Drop rows with missing values in any of ``check_columns``.

    Args:
        columns: Column name -> values
        check_columns: Columns that must not contain missing values
        na_rm: If True, remove silently; otherwise warn about removed rows
        layer_name: Layer name used in the warning

    Returns:
        New column dict without the incomplete rows

    Raises:
        ValueError: If the columns differ in length
    """
    arrays = {name: np.asarray(values) for name, values in columns.items()}
    lengths = {len(values) for values in arrays.values()}
    if len(lengths) > 1:
        raise ValueError(f"Columns have differing lengths: {sorted(lengths)}")
    n_rows = lengths.pop() if lengths else 0

    keep = np.ones(n_rows, dtype=bool)
    for name in check_columns:
        if name in arrays:
            keep &= ~_is_missing(arrays[name])

    removed = int(n_rows - keep.sum())
    if removed == 0:
        return arrays

    if na_rm:
        logger.debug(f"Removed {removed} rows containing missing values ({layer_name}).")
    else:
        logger.warning(f"Removed {removed} rows containing missing values ({layer_name}).")

    return {name: values[keep] for name, values in arrays.items()}


@dataclass
class Layer:
    """A stat + geom pairing with its data, mapping and style parameters."""

    stat: Stat
    geom: str = DEFAULT_GEOM
    position: str = DEFAULT_POSITION
    mapping: dict[str, str] = field(default_factory=dict)
    data: ColumnData | None = None
    show_legend: bool | None = None
    inherit_aes: bool = True
    na_rm: bool = False
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return f"stat_{self.stat.name}"

    def resolve_mapping(self, plot_mapping: Mapping[str, str] | None = None) -> dict[str, str]:
        """Combine the plot mapping with this layer's mapping (layer wins)."""
        if not self.inherit_aes or not plot_mapping:
            return dict(self.mapping)
        return {**plot_mapping, **self.mapping}

    def legend_visible(self, plot_mapping: Mapping[str, str] | None = None) -> bool:
        """
        Whether the layer gets a legend entry.

        ``show_legend=None`` includes the layer only if ``group`` is mapped,
        since each group is drawn as its own named trace. Other mapped
        aesthetics (e.g. ``colour``) do not change how edges are drawn, so
        they do not add a legend entry; set a fixed colour through params.
        """
        if self.show_legend is not None:
            return self.show_legend

        return "group" in self.resolve_mapping(plot_mapping)

    def compute(
        self,
        plot_data: ColumnData | None = None,
        plot_mapping: Mapping[str, str] | None = None,
    ) -> SegmentTable:
        """
        Run the layer's stat on its data.

        Args:
            plot_data: Plot-wide data, used when the layer has none
            plot_mapping: Plot-wide aesthetic mapping

        Returns:
            SegmentTable produced by the stat

        Raises:
            ValueError: If there is no data, a required aesthetic is
                missing, or the position is unknown
            IndexError: If an edge index is out of range
        """
        data = self.data if self.data is not None else plot_data
        if data is None:
            raise ValueError(f"{self.name}() has no data: pass data to the layer or the plot")

        mapping = self.resolve_mapping(plot_mapping)
        check_required_aes(self.stat, mapping, list(data.keys()))

        required = list(self.stat.required_aes)
        if "group" in mapping:
            required.append("group")
        check_columns = [mapping.get(aes, aes) for aes in required]
        columns = remove_missing(data, check_columns, na_rm=self.na_rm, layer_name=self.name)
        if not any(len(values) for values in columns.values()):
            logger.debug(f"{self.name}: no rows left, nothing to draw")
            return SegmentTable.empty()

        table = PointEdgeTable.from_columns(columns, mapping)

        try:
            adjust = POSITIONS[self.position]
        except KeyError:
            raise ValueError(
                f"Unknown position '{self.position}'. Available: {', '.join(sorted(POSITIONS))}"
            ) from None
        table = adjust(table)

        segments = self.stat.compute_panel(table, self.params)
        logger.debug(f"{self.name}: {len(table)} rows -> {len(segments)} segments")
        return segments


def stat_mst(
    mapping: Mapping[str, str] | None = None,
    data: ColumnData | None = None,
    geom: str = DEFAULT_GEOM,
    position: str = DEFAULT_POSITION,
    na_rm: bool = False,
    linetype: str | int = DEFAULT_LINETYPE,
    show_legend: bool | None = None,
    inherit_aes: bool = True,
    **params: Any,
) -> Layer:
    """
    Create a layer drawing the edges of a precomputed MST.

    Combine with a scatter of the same points. The required aesthetics are
    ``x``, ``y``, ``from`` and ``to``: the columns of a table produced by an
    MST builder, where each row's ``from``/``to`` are 1-based indices of the
    rows it connects.

    Args:
        mapping: Aesthetic -> column name, e.g. {"x": "lon", "y": "lat"}
        data: Column data for this layer; defaults to the plot's data
        geom: "segment" for straight edges or "curve" for curved ones
        position: Position adjustment ("identity")
        na_rm: Remove rows with missing values without a warning
        linetype: Line style name or code 0-6 (default "dotted")
        show_legend: True/False to force, None to include only if mapped
        inherit_aes: Combine with the plot mapping rather than replace it
        **params: Styling passed to the renderer (colour, linewidth, alpha,
            curvature, ...)

    Returns:
        Layer to pass to ``create_figure``

    Example:
        layer = stat_mst(colour="red", linetype=2)
        fig = create_figure(data, {"x": "x", "y": "y", "from": "from", "to": "to"}, [layer])
    """
    unknown = sorted(set(params) - KNOWN_PARAMS)
    if unknown:
        logger.warning(f"Ignoring unknown parameters: {', '.join(unknown)}")
        params = {k: v for k, v in params.items() if k in KNOWN_PARAMS}

    return Layer(
        stat=get_stat("mst"),
        geom=geom,
        position=position,
        mapping=dict(mapping or {}),
        data=data,
        show_legend=show_legend,
        inherit_aes=inherit_aes,
        na_rm=na_rm,
        params={"linetype": normalize_linetype(linetype), **params},
    )
