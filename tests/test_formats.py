"""
Tests for image file naming and figure output.

These tests verify that:
1. File name extension and image format always agree
2. EPS requests are written as PS with an .eps name
3. Unknown formats fall back to SVG
4. Figures are written (or skipped) according to the run configuration
"""

import logging
import os

import pytest
import matplotlib.pyplot as plt

from mads.config import MadsConfig
from mads.plots.formats import ImageFormat, save_figure, set_image_file_format


# =============================================================================
# RESOLVER TESTS
# =============================================================================

class TestSetImageFileFormat:
    """Test the filename/format resolver."""

    @pytest.mark.parametrize("filename, format, expected", [
        ("a.png", "", ("a.png", ImageFormat.PNG)),
        ("a", "png", ("a.png", ImageFormat.PNG)),
        ("a.png", "pdf", ("a.pdf", ImageFormat.PDF)),
        ("a.pdf", "PDF", ("a.pdf", ImageFormat.PDF)),
        ("a.svg", "", ("a.svg", ImageFormat.SVG)),
        ("a.png", "ps", ("a.ps", ImageFormat.PS)),
        ("a.ps", "", ("a.ps", ImageFormat.PS)),
    ])
    def test_known_formats(self, filename, format, expected):
        assert set_image_file_format(filename, format) == expected

    def test_eps_request_gives_ps_with_eps_name(self):
        assert set_image_file_format("a.ps", "eps") == ("a.eps", ImageFormat.PS)
        assert set_image_file_format("a", "EPS") == ("a.eps", ImageFormat.PS)

    def test_eps_extension_is_kept_for_ps(self):
        assert set_image_file_format("a.eps", "ps") == ("a.eps", ImageFormat.PS)
        assert set_image_file_format("a.eps", "") == ("a.eps", ImageFormat.PS)

    def test_unknown_format_falls_back_to_svg(self):
        assert set_image_file_format("a.png", "tiff") == ("a.svg", ImageFormat.SVG)
        assert set_image_file_format("a.txt", "") == ("a.svg", ImageFormat.SVG)
        assert set_image_file_format("a", "") == ("a.svg", ImageFormat.SVG)

    def test_only_last_extension_is_replaced(self):
        name, fmt = set_image_file_format("out/w01.v2.png", "pdf")
        assert name == "out/w01.v2.pdf"
        assert fmt is ImageFormat.PDF

    def test_enum_format_is_accepted(self):
        assert set_image_file_format("a.png", ImageFormat.SVG) == ("a.svg", ImageFormat.SVG)

    @pytest.mark.parametrize("filename, format", [
        ("a", "png"), ("a.png", "pdf"), ("a.ps", "eps"), ("a.eps", "ps"),
        ("a.txt", ""), ("a", "jpg"), ("b.svg", "svg"),
    ])
    def test_idempotent(self, filename, format):
        name, fmt = set_image_file_format(filename, format)
        assert set_image_file_format(name, fmt) == (name, fmt)
        assert set_image_file_format(name, "") == (name, fmt)

    @pytest.mark.parametrize("filename, format", [
        ("a", "png"), ("a.txt", "pdf"), ("a", "eps"), ("a", "bogus"),
    ])
    def test_extension_matches_format(self, filename, format):
        name, fmt = set_image_file_format(filename, format)
        extension = name.rsplit('.', 1)[1]
        if fmt is ImageFormat.PS:
            assert extension in ('ps', 'eps')
        else:
            assert extension == fmt.value

    @pytest.mark.parametrize("text, expected", [
        ("png", ImageFormat.PNG),
        ("PDF", ImageFormat.PDF),
        ("eps", ImageFormat.PS),
        ("gif", ImageFormat.SVG),
        ("", ImageFormat.SVG),
        (ImageFormat.PS, ImageFormat.PS),
    ])
    def test_parse(self, text, expected):
        assert ImageFormat.parse(text) is expected

    def test_matplotlib_format(self):
        assert ImageFormat.PS.matplotlib_format("a.eps") == 'eps'
        assert ImageFormat.PS.matplotlib_format("a.ps") == 'ps'
        assert ImageFormat.PNG.matplotlib_format("a.png") == 'png'


# =============================================================================
# FIGURE OUTPUT TESTS
# =============================================================================

class TestSaveFigure:
    """Test writing figures to disk."""

    def _figure(self):
        fig, ax = plt.subplots()
        ax.plot([0, 1], [0, 1])
        return fig

    def test_writes_file_with_resolved_name(self, tmp_path):
        config = MadsConfig(output_dir=str(tmp_path))
        path = save_figure(self._figure(), "plot", "png", config)
        assert path == os.path.join(str(tmp_path), "plot.png")
        assert os.path.exists(path)

    def test_eps_output(self, tmp_path):
        config = MadsConfig(output_dir=str(tmp_path))
        path = save_figure(self._figure(), "plot", "eps", config)
        assert path.endswith("plot.eps")
        assert os.path.getsize(path) > 0

    def test_creates_missing_directories(self, tmp_path):
        config = MadsConfig()
        target = tmp_path / "nested" / "dir" / "plot.svg"
        path = save_figure(self._figure(), str(target), "", config)
        assert path == str(target)
        assert target.exists()

    def test_plotting_disabled_writes_nothing(self, tmp_path):
        config = MadsConfig(plotting=False, output_dir=str(tmp_path))
        assert save_figure(self._figure(), "plot", "png", config) is None
        assert list(tmp_path.iterdir()) == []

    def test_backend_failure_is_logged(self, tmp_path, caplog, monkeypatch):
        config = MadsConfig(output_dir=str(tmp_path))
        fig = self._figure()

        def failing_savefig(*args, **kwargs):
            raise ValueError("At least one finite value must be provided")

        monkeypatch.setattr(fig, 'savefig', failing_savefig)
        with caplog.at_level(logging.WARNING, logger='mads'):
            assert save_figure(fig, "plot", "png", config) is None
        assert "Plotting fails!" in caplog.text

    def test_saved_message_unless_quiet(self, tmp_path, capsys):
        save_figure(self._figure(), "loud", "png", MadsConfig(quiet=False, output_dir=str(tmp_path)))
        assert "Saved:" in capsys.readouterr().out
        save_figure(self._figure(), "silent", "png", MadsConfig(quiet=True, output_dir=str(tmp_path)))
        assert capsys.readouterr().out == ""
