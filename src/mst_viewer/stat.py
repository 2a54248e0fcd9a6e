"""Edge coordinate resolution for MST overlays (the ``mst`` stat)."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Sequence

import numpy as np

logger = logging.getLogger(__name__)

# Aesthetics the MST stat cannot work without
MST_REQUIRED_AES = ("x", "y", "from", "to")


@dataclass
class PointEdgeTable:
    """Points annotated with the MST edge each row carries.

    ``from_`` and ``to`` are 1-based row indices into this same table.
    """

    x: np.ndarray
    y: np.ndarray
    from_: np.ndarray
    to: np.ndarray
    group: np.ndarray | None = None

    def __len__(self) -> int:
        return len(self.x)

    @classmethod
    def from_columns(
        cls,
        columns: Mapping[str, Sequence[Any]],
        mapping: Mapping[str, str] | None = None,
    ) -> "PointEdgeTable":
        """
        Build a table from named columns through an aesthetic mapping.

        Args:
            columns: Column name -> values, all of the same length
            mapping: Aesthetic -> column name. Required aesthetics not in
                the mapping are looked up under their own name; rows are
                only grouped when "group" is mapped.

        Returns:
            PointEdgeTable with float coordinates and integer indices

        Raises:
            KeyError: If a mapped column does not exist
            ValueError: If columns differ in length or an index is not integral
        """
        mapping = dict(mapping or {})

        def column(aes: str) -> np.ndarray:
            name = mapping.get(aes, aes)
            if name not in columns:
                raise KeyError(f"Column '{name}' (aesthetic '{aes}') not found")
            return np.asarray(columns[name])

        x = column("x").astype(float)
        y = column("y").astype(float)
        from_ = _as_index_array(column("from"), "from")
        to = _as_index_array(column("to"), "to")

        group = None
        if "group" in mapping:
            group = column("group")

        lengths = {len(x), len(y), len(from_), len(to)}
        if group is not None:
            lengths.add(len(group))
        if len(lengths) > 1:
            raise ValueError(f"Columns have differing lengths: {sorted(lengths)}")

        return cls(x=x, y=y, from_=from_, to=to, group=group)

    def subset(self, mask: np.ndarray) -> "PointEdgeTable":
        """Return the rows selected by a boolean mask."""
        return PointEdgeTable(
            x=self.x[mask],
            y=self.y[mask],
            from_=self.from_[mask],
            to=self.to[mask],
            group=None if self.group is None else self.group[mask],
        )


@dataclass
class SegmentTable:
    """Segment endpoints: one (x, y) -> (xend, yend) segment per row."""

    x: np.ndarray
    y: np.ndarray
    xend: np.ndarray
    yend: np.ndarray
    group: np.ndarray | None = None

    def __len__(self) -> int:
        return len(self.x)

    def rows(self) -> Iterator[tuple[float, float, float, float]]:
        """Iterate over (x, y, xend, yend) tuples."""
        for x, y, xend, yend in zip(self.x, self.y, self.xend, self.yend):
            yield (float(x), float(y), float(xend), float(yend))

    def with_group(self, value: Any) -> "SegmentTable":
        """Return a copy with every row tagged with one group value."""
        return SegmentTable(
            x=self.x,
            y=self.y,
            xend=self.xend,
            yend=self.yend,
            group=np.full(len(self), value, dtype=object),
        )

    @classmethod
    def empty(cls) -> "SegmentTable":
        return cls(
            x=np.array([], dtype=float),
            y=np.array([], dtype=float),
            xend=np.array([], dtype=float),
            yend=np.array([], dtype=float),
        )

    @classmethod
    def concat(cls, tables: Sequence["SegmentTable"]) -> "SegmentTable":
        """Stack tables row-wise, keeping groups if every table has them."""
        if not tables:
            return cls.empty()

        group = None
        if all(t.group is not None for t in tables):
            group = np.concatenate([t.group for t in tables])

        return cls(
            x=np.concatenate([t.x for t in tables]),
            y=np.concatenate([t.y for t in tables]),
            xend=np.concatenate([t.xend for t in tables]),
            yend=np.concatenate([t.yend for t in tables]),
            group=group,
        )


def _as_index_array(values: np.ndarray, name: str) -> np.ndarray:
    """Convert edge index values to an int array, rejecting non-integers."""
    try:
        as_float = values.astype(float)
    except (TypeError, ValueError) as e:
        raise ValueError(f"'{name}' indices must be numeric: {e}") from e

    if len(as_float) and not np.all(np.isfinite(as_float)):
        raise ValueError(f"'{name}' indices contain missing values")
    if not np.array_equal(as_float, np.round(as_float)):
        raise ValueError(f"'{name}' indices must be whole numbers")

    return as_float.astype(np.int64)


def _check_indices(indices: np.ndarray, n_rows: int, name: str) -> None:
    out_of_range = (indices < 1) | (indices > n_rows)
    if np.any(out_of_range):
        bad = indices[out_of_range]
        raise IndexError(
            f"'{name}' index {int(bad[0])} out of range for table with {n_rows} rows "
            f"({len(bad)} invalid)"
        )


def resolve_segments(table: PointEdgeTable) -> SegmentTable:
    """
    Look up segment endpoint coordinates for every edge row.

    The last row's edge is first replaced by the first row's edge. MST
    tables end with a closing row whose ``from == to``; drawing that as a
    curve fails because its end points are identical.

    Args:
        table: Points with 1-based ``from``/``to`` edge indices

    Returns:
        SegmentTable with one segment per input row. The input table is
        not modified.

    Raises:
        ValueError: If the table is empty
        IndexError: If any edge index does not refer to a row of the table
    """
    n_rows = len(table)
    if n_rows == 0:
        raise ValueError("Cannot resolve segments for an empty table")

    from_idx = table.from_.copy()
    to_idx = table.to.copy()

    if n_rows > 1 and from_idx[-1] != to_idx[-1]:
        logger.debug(
            f"Last row edge ({from_idx[-1]} -> {to_idx[-1]}) is not a self-loop, "
            f"replacing it with first row edge ({from_idx[0]} -> {to_idx[0]})"
        )
    from_idx[-1] = from_idx[0]
    to_idx[-1] = to_idx[0]

    _check_indices(from_idx, n_rows, "from")
    _check_indices(to_idx, n_rows, "to")

    starts = from_idx - 1
    ends = to_idx - 1

    return SegmentTable(
        x=table.x[starts],
        y=table.y[starts],
        xend=table.x[ends],
        yend=table.y[ends],
    )


class Stat(ABC):
    """
    A data transform run before rendering.

    Subclasses set ``name`` and ``required_aes`` and implement
    ``compute_group``. The renderer calls ``compute_panel`` once per layer.
    """

    name: str = ""
    required_aes: tuple[str, ...] = ()

    def compute_panel(
        self,
        table: PointEdgeTable,
        params: Mapping[str, Any],
    ) -> SegmentTable:
        """
        Run ``compute_group`` on each group and stack the results.

        Edge indices are local to a group: index 1 is the group's first row.
        Groups are processed in sorted order.
        """
        if table.group is None:
            return self.compute_group(table, params)

        results: list[SegmentTable] = []
        for value in np.unique(table.group):
            group_table = table.subset(table.group == value)
            logger.debug(f"Computing {self.name} stat for group {value!r} ({len(group_table)} rows)")
            results.append(self.compute_group(group_table, params).with_group(value))

        return SegmentTable.concat(results)

    @abstractmethod
    def compute_group(
        self,
        table: PointEdgeTable,
        params: Mapping[str, Any],
    ) -> SegmentTable:
        """Transform the rows of one group into segments."""


class StatMST(Stat):
    """Segments between MST-connected points."""

    name = "mst"
    required_aes = MST_REQUIRED_AES

    def compute_group(
        self,
        table: PointEdgeTable,
        params: Mapping[str, Any],
    ) -> SegmentTable:
        return resolve_segments(table)


_STATS: dict[str, Stat] = {}


def register_stat(stat: Stat) -> Stat:
    """Make a stat available to layers under ``stat.name``."""
    if not stat.name:
        raise ValueError("Stat must have a name to be registered")
    _STATS[stat.name] = stat
    return stat


def get_stat(name: str) -> Stat:
    """Return the registered stat called ``name``."""
    try:
        return _STATS[name]
    except KeyError:
        raise ValueError(
            f"Unknown stat '{name}'. Registered stats: {', '.join(sorted(_STATS))}"
        ) from None


def check_required_aes(
    stat: Stat,
    mapping: Mapping[str, str],
    columns: Sequence[str],
) -> None:
    """
    Verify every required aesthetic is mapped or present as a column.

    Raises:
        ValueError: Naming the missing aesthetics
    """
    missing = [aes for aes in stat.required_aes if aes not in mapping and aes not in columns]
    if not missing:
        return

    if len(missing) == 1:
        names = missing[0]
    else:
        names = ", ".join(missing[:-1]) + " and " + missing[-1]
    raise ValueError(f"stat_{stat.name}() requires the following missing aesthetics: {names}")


register_stat(StatMST())
