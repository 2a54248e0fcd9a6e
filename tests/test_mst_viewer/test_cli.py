"""
Tests for the MST viewer command-line interface.

setup_logging is patched out so tests don't reconfigure the root logger
or write to logs/.
"""

import pytest
from unittest.mock import patch

from src.mst_viewer.cli import build_parser, main


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("src.mst_viewer.cli.setup_logging"):
        yield


class TestParser:
    """Tests for argument defaults."""

    def test_defaults(self):
        args = build_parser().parse_args(["mst.csv"])

        assert args.x == "x"
        assert args.y == "y"
        assert args.from_column == "from"
        assert args.to_column == "to"
        assert args.geom == "segment"
        assert args.linetype == "dotted"
        assert args.colour is None
        assert args.na_rm is False

    def test_color_alias(self):
        args = build_parser().parse_args(["mst.csv", "--color", "red"])
        assert args.colour == "red"

    def test_invalid_geom_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["mst.csv", "--geom", "ribbon"])


class TestMain:
    """Tests for main()."""

    def test_export_html(self, mst_csv, tmp_path, capsys):
        output = tmp_path / "out.html"

        main([mst_csv, "--geom", "curve", "--colour", "red", "--export", str(output)])

        assert output.exists()
        assert "Exported to" in capsys.readouterr().out

    def test_shows_figure_without_export(self, mst_csv):
        with patch("src.mst_viewer.cli.show_figure") as mock_show:
            main([mst_csv, "--linetype", "2"])

        mock_show.assert_called_once()
        fig = mock_show.call_args[0][0]
        assert fig.data[0].line.dash == "dash"

    def test_missing_file_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "missing.csv")])

        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_out_of_range_index_exits(self, tmp_path, capsys):
        path = tmp_path / "bad.csv"
        path.write_text("x,y,from,to\n0,0,5,2\n1,1,2,1\n2,2,3,3\n")

        with pytest.raises(SystemExit) as exc_info:
            main([str(path), "--export", str(tmp_path / "out.html")])

        assert exc_info.value.code == 1
        assert "out of range" in capsys.readouterr().err

    def test_header_only_csv_exports_empty_plot(self, tmp_path):
        path = tmp_path / "header.csv"
        path.write_text("x,y,from,to\n")
        output = tmp_path / "out.html"

        main([str(path), "--export", str(output)])

        assert output.exists()

    def test_invalid_linetype_exits(self, mst_csv, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([mst_csv, "--linetype", "wiggly"])

        assert exc_info.value.code == 1
        assert "Invalid linetype" in capsys.readouterr().err

    def test_custom_columns(self, tmp_path):
        path = tmp_path / "ports.csv"
        path.write_text("lon,lat,a,b\n8.9,44.4,1,2\n10.2,36.8,2,2\n")

        with patch("src.mst_viewer.cli.show_figure") as mock_show:
            main([str(path), "--x", "lon", "--y", "lat", "--from", "a", "--to", "b"])

        fig = mock_show.call_args[0][0]
        assert fig.layout.xaxis.title.text == "lon"
