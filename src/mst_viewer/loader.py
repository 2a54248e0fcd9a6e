"""Load MST point-edge tables from CSV files."""

import csv
import logging
import os

import numpy as np

logger = logging.getLogger(__name__)

# Cell values read as missing in numeric columns
MISSING_VALUES = frozenset({"", "NA", "NaN", "nan", "null", "None"})


def _parse_column(values: list[str]) -> np.ndarray:
    """Convert a column to floats if every non-missing cell is numeric."""
    numbers: list[float] = []
    for value in values:
        value = value.strip()
        if value in MISSING_VALUES:
            numbers.append(np.nan)
            continue
        try:
            numbers.append(float(value))
        except ValueError:
            return np.array([value.strip() for value in values], dtype=object)

    return np.array(numbers, dtype=float)


def load_table(path: str) -> dict[str, np.ndarray]:
    """
    Load a point-edge table from a CSV file.

    The file is expected to hold the output of an MST builder: one row per
    point with its coordinates and the 1-based ``from``/``to`` indices of
    the edge stored on that row.

    Args:
        path: Path to a CSV file with a header row

    Returns:
        Dict mapping column name to values (float arrays for numeric
        columns, with NaN for missing cells; object arrays otherwise)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file has no header or rows have the wrong length
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Table file not found: {path}")

    with open(path, newline="", encoding="utf-8-sig") as table_file:
        reader = csv.reader(table_file)
        try:
            header = [name.strip() for name in next(reader)]
        except StopIteration:
            raise ValueError(f"Table file is empty: {path}") from None

        if not any(header):
            raise ValueError(f"Table file has no header: {path}")
        if len(set(header)) != len(header):
            raise ValueError(f"Duplicate column names in {path}: {header}")

        raw: dict[str, list[str]] = {name: [] for name in header}
        for line_number, row in enumerate(reader, start=2):
            if not row:
                continue
            if len(row) != len(header):
                raise ValueError(
                    f"Line {line_number} of {path} has {len(row)} fields, "
                    f"expected {len(header)}"
                )
            for name, value in zip(header, row):
                raw[name].append(value)

    columns = {name: _parse_column(values) for name, values in raw.items()}

    n_rows = len(next(iter(raw.values())))
    logger.info(f"Loaded table: {n_rows} rows, columns: {', '.join(header)}")

    return columns
