"""Command-line interface for the MST viewer."""

import argparse
import logging
import sys

from src.logging_config import setup_logging
from src.mst_viewer.layer import DEFAULT_LINETYPE, stat_mst
from src.mst_viewer.loader import load_table
from src.mst_viewer.viewer import GEOMS, create_figure, export_html, show_figure


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the viewer CLI."""
    parser = argparse.ArgumentParser(
        description="MST Viewer - scatter plot with Minimum Spanning Tree edges",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # View an MST table (columns x, y, from, to) in the browser
  mst-viewer data/mst.csv

  # Curved red dashed edges
  mst-viewer data/mst.csv --geom curve --colour red --linetype dashed

  # Coordinates stored in lon/lat columns, export to HTML
  mst-viewer data/ports.csv --x lon --y lat --export ports.html
        """,
    )

    parser.add_argument(
        "path",
        type=str,
        help="Path to CSV file with points and MST edge indices",
    )
    parser.add_argument("--x", default="x", metavar="COL", help="Column with x coordinates")
    parser.add_argument("--y", default="y", metavar="COL", help="Column with y coordinates")
    parser.add_argument(
        "--from",
        dest="from_column",
        default="from",
        metavar="COL",
        help="Column with 1-based edge start indices",
    )
    parser.add_argument(
        "--to",
        dest="to_column",
        default="to",
        metavar="COL",
        help="Column with 1-based edge end indices",
    )
    parser.add_argument(
        "--geom",
        choices=sorted(GEOMS),
        default="segment",
        help="Draw edges as straight segments or curves (default: segment)",
    )
    parser.add_argument(
        "--linetype",
        default=DEFAULT_LINETYPE,
        help=f"Line style name or code 0-6 (default: {DEFAULT_LINETYPE})",
    )
    parser.add_argument("--colour", "--color", dest="colour", default=None, help="Edge colour")
    parser.add_argument("--linewidth", type=float, default=None, help="Edge line width")
    parser.add_argument(
        "--curvature",
        type=float,
        default=None,
        help="Curvature for --geom curve (negative bends left)",
    )
    parser.add_argument(
        "--na-rm",
        action="store_true",
        help="Drop rows with missing values without a warning",
    )
    parser.add_argument(
        "--no-points",
        action="store_true",
        help="Hide the point markers",
    )
    parser.add_argument(
        "--title",
        type=str,
        default=None,
        help="Custom title for the visualization",
    )
    parser.add_argument(
        "--export",
        type=str,
        metavar="FILE",
        help="Export to HTML file instead of opening browser",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for MST viewer CLI."""
    args = build_parser().parse_args(argv)

    setup_logging()
    if args.verbose:
        logging.getLogger("src.mst_viewer").setLevel(logging.DEBUG)

    logger = logging.getLogger(__name__)

    try:
        logger.info(f"Loading table from {args.path}")
        data = load_table(args.path)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    style = {}
    if args.colour is not None:
        style["colour"] = args.colour
    if args.linewidth is not None:
        style["linewidth"] = args.linewidth
    if args.curvature is not None:
        style["curvature"] = args.curvature

    mapping = {
        "x": args.x,
        "y": args.y,
        "from": args.from_column,
        "to": args.to_column,
    }

    try:
        layer = stat_mst(geom=args.geom, linetype=args.linetype, na_rm=args.na_rm, **style)
        fig = create_figure(
            data,
            mapping,
            layers=[layer],
            title=args.title or f"MST: {args.path}",
            show_points=not args.no_points,
        )
    except (IndexError, KeyError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.export:
        logger.info(f"Exporting to {args.export}")
        export_html(fig, args.export)
        print(f"Exported to {args.export}")
    else:
        logger.info("Opening in browser")
        show_figure(fig)


if __name__ == "__main__":
    main()
