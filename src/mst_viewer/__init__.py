"""MST Viewer - overlay Minimum Spanning Tree edges on 2D scatter plots."""

from src.mst_viewer.layer import Layer, stat_mst
from src.mst_viewer.loader import load_table
from src.mst_viewer.stat import (
    PointEdgeTable,
    SegmentTable,
    Stat,
    StatMST,
    get_stat,
    register_stat,
    resolve_segments,
)
from src.mst_viewer.viewer import create_figure

__all__ = [
    "Layer",
    "stat_mst",
    "load_table",
    "PointEdgeTable",
    "SegmentTable",
    "Stat",
    "StatMST",
    "get_stat",
    "register_stat",
    "resolve_segments",
    "create_figure",
]
