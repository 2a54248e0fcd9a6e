"""
Shared pytest fixtures for mst_viewer tests.

This module provides reusable fixtures that are automatically discovered
by pytest. Fixtures here are available to all test files.

Tables are plain column dicts, the same shape ``load_table`` returns.
"""

import numpy as np
import pytest


@pytest.fixture
def mst_mapping() -> dict[str, str]:
    """Identity mapping for tables with x, y, from, to columns."""
    return {"x": "x", "y": "y", "from": "from", "to": "to"}


@pytest.fixture
def three_point_columns() -> dict[str, list]:
    """
    Three points whose last row is a degenerate closing edge (3 -> 3).

    Rows:
        1: (0, 0) edge 1 -> 2
        2: (1, 1) edge 2 -> 1
        3: (2, 2) edge 3 -> 3
    """
    return {
        "x": [0.0, 1.0, 2.0],
        "y": [0.0, 1.0, 2.0],
        "from": [1, 2, 3],
        "to": [2, 1, 3],
    }


@pytest.fixture
def mst_columns() -> dict[str, np.ndarray]:
    """
    An MST over four points as an MST builder would return it.

    Edges 1-2, 2-3 and 3-4 are stored on rows 1-3; row 4 is the closing
    self-loop.
    """
    return {
        "x": np.array([0.0, 1.0, 1.0, 3.0]),
        "y": np.array([0.0, 0.0, 1.0, 1.0]),
        "from": np.array([1.0, 2.0, 3.0, 4.0]),
        "to": np.array([2.0, 3.0, 4.0, 4.0]),
    }


@pytest.fixture
def grouped_columns() -> dict[str, list]:
    """Two independent MSTs (groups "a" and "b") with group-local indices."""
    return {
        "x": [0.0, 1.0, 10.0, 12.0],
        "y": [0.0, 0.0, 5.0, 5.0],
        "from": [1, 2, 1, 2],
        "to": [2, 2, 2, 2],
        "cluster": ["a", "a", "b", "b"],
    }


@pytest.fixture
def mst_csv(tmp_path):
    """Write a small MST table to a CSV file and return its path."""
    path = tmp_path / "mst.csv"
    path.write_text(
        "x,y,from,to\n"
        "0,0,1,2\n"
        "1,0,2,3\n"
        "1,1,3,4\n"
        "3,1,4,4\n"
    )
    return str(path)
