"""Tests for the command line front end."""

import pytest

from instafilter.main import build_parser, main
from instafilter.oiio import OiioAdapter


@pytest.fixture
def settings_path(tmp_path):
    return str(tmp_path / "settings.ini")


def test_list_filters(capsys, settings_path):
    assert main(["--list-filters", "--settings", settings_path]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 7
    assert lines[0].startswith("crystallize")
    assert "[intensity, radius]" in lines[-1]


def test_slider_must_be_normalized():
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(["in.png", "out.png", "--radius", "1.5"])
    assert exc.value.code == 2


def test_missing_arguments(settings_path):
    with pytest.raises(SystemExit) as exc:
        main(["--settings", settings_path])
    assert exc.value.code == 2


def test_end_to_end(tmp_path, gradient_image, capsys, settings_path):
    source = tmp_path / "photo.png"
    OiioAdapter.save_image(source, gradient_image)
    target = tmp_path / "out.png"

    code = main([str(source), str(target), "--filter", "pixellate", "--scale", "0.1",
                 "--settings", settings_path])

    assert code == 0
    assert f"Saved {target}" in capsys.readouterr().out
    result = OiioAdapter.load_image(target)
    assert result.shape == gradient_image.shape


def test_unreadable_input(tmp_path, capsys, settings_path):
    code = main([str(tmp_path / "missing.png"), str(tmp_path / "out.png"),
                 "--settings", settings_path])
    assert code == 1
    assert "Cannot read image" in capsys.readouterr().err


def test_invalid_settings(tmp_path, capsys, gradient_image):
    path = tmp_path / "settings.ini"
    path.write_text("[scale_factors]\npixellate.scale = 0\n")
    source = tmp_path / "photo.png"
    OiioAdapter.save_image(source, gradient_image)

    code = main([str(source), str(tmp_path / "out.png"), "--settings", str(path)])
    assert code == 1
    assert "Invalid settings" in capsys.readouterr().err


def test_settings_without_section_header(tmp_path, capsys, gradient_image):
    path = tmp_path / "settings.ini"
    path.write_text("pixellate.scale = 10\n")
    source = tmp_path / "photo.png"
    OiioAdapter.save_image(source, gradient_image)

    code = main([str(source), str(tmp_path / "out.png"), "--settings", str(path)])
    assert code == 1
    assert "Invalid settings" in capsys.readouterr().err
