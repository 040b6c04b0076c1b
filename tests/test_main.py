"""Tests for the command-line entry point.

Tests cover:
- Argument parsing and camera overrides
- PPM output on stdout
- Writing to a file
- Rejection of invalid settings
"""

import pytest
from loguru import logger
from PIL import Image

from raytracing.main import build_parser, main

TINY = ["--width", "6", "--height", "4", "--samples", "1", "--max-depth", "2", "--seed", "0", "--quiet"]


@pytest.fixture(autouse=True)
def reset_logger():
    """Drops the stderr handler main installs so it does not outlive the test."""
    yield
    logger.remove()


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.scene == "three-spheres"
        assert args.output == "-"
        assert args.width is None
        assert not args.quiet

    def test_vector_options(self):
        args = build_parser().parse_args(["--look-from", "1", "2", "3", "--vup", "0", "0", "1"])
        assert args.look_from == [1.0, 2.0, 3.0]
        assert args.vup == [0.0, 0.0, 1.0]

    def test_unknown_scene(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--scene", "cornell"])


class TestMain:
    """Tests for full command-line renders."""

    def test_ppm_to_stdout(self, capsys):
        assert main(TINY) == 0
        out = capsys.readouterr().out
        lines = out.splitlines()
        assert lines[:3] == ["P3", "6 4", "255"]
        assert len(lines) == 3 + 6 * 4
        for line in lines[3:]:
            values = [int(v) for v in line.split()]
            assert len(values) == 3
            assert all(0 <= v <= 255 for v in values)

    def test_png_file(self, tmp_path):
        path = tmp_path / "render.png"
        assert main(TINY + ["--output", str(path)]) == 0
        with Image.open(path) as img:
            assert img.size == (6, 4)

    def test_ppm_file(self, tmp_path):
        path = tmp_path / "render.ppm"
        assert main(TINY + ["--scene", "final", "--output", str(path)]) == 0
        assert path.read_text(encoding="ascii").startswith("P3\n6 4\n255\n")

    def test_same_seed_same_output(self, capsys):
        main(TINY)
        first = capsys.readouterr().out
        main(TINY)
        second = capsys.readouterr().out
        assert first == second

    def test_invalid_setting(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(TINY + ["--vfov", "200"])
        assert excinfo.value.code == 2
        assert "vfov" in capsys.readouterr().err
