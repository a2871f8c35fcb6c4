import logging

import pytest

pytest.importorskip("PySide6.QtWidgets")

import SpiroTrace  # noqa: E402
from datetime import datetime  # noqa: E402
from guide_geometry import CircleGuide, StarGuide  # noqa: E402
from spirotrace_config import GRADIENT_PRESETS  # noqa: E402


def _config(argv):
    parser = SpiroTrace.build_parser()
    return SpiroTrace.config_from_args(parser, parser.parse_args(argv))


def test_export_file_name():
    name = SpiroTrace.export_file_name(datetime(2024, 3, 5, 14, 7, 9))
    assert name == "spirograph-2024-03-05T14-07-09.png"


def test_config_from_args():
    config = _config(
        ["--shape", "star", "--param", "points=7", "--param", "outer_radius=180", "--gradient", "2"]
    )
    assert config.guide == StarGuide(180.0, 100.0, 7)
    assert config.color == GRADIENT_PRESETS[1]
    assert _config(["--color", "Red"]).color == "#ff0000"


def test_unknown_shape_uses_fallback_circle(caplog):
    with caplog.at_level(logging.WARNING):
        config = _config(["--shape", "blob"])
    assert config.guide == CircleGuide(150.0)


def test_invalid_options_exit():
    with pytest.raises(SystemExit):
        _config(["--color", "not-a-color"])
    with pytest.raises(SystemExit):
        _config(["--gradient", "9"])
    with pytest.raises(SystemExit):
        _config(["--param", "radius"])
    with pytest.raises(SystemExit):
        SpiroTrace.main(["--backend", "fortran", "--render", "unused.png"])


def test_headless_render(tmp_path):
    target = tmp_path / "star.png"
    code = SpiroTrace.main(
        ["--render", str(target), "--shape", "star", "--width", "120", "--height", "120", "--turns", "2"]
    )
    assert code == 0
    assert target.exists()
