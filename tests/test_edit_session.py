"""Tests for the edit session: pick, filter, save."""

import numpy as np
import pytest

from instafilter.core import NO_IMAGE_MESSAGE, ParameterKind
from instafilter.oiio import OiioAdapter
from instafilter.services import EditSession


@pytest.fixture
def photo(tmp_path, gradient_image):
    path = tmp_path / "in" / "photo.png"
    path.parent.mkdir()
    OiioAdapter.save_image(path, gradient_image)
    return path


def test_session_starts_from_settings(settings):
    settings.set_default_filter("pixellate")
    session = EditSession(settings=settings)
    assert session.filter_display_name == "Pixellate"
    assert session.processed_image is None
    assert [f.filter_id for f in session.available_filters()][0] == "crystallize"


def test_save_before_picking_reports_message(settings, tmp_path):
    session = EditSession(settings=settings)
    result = session.save(tmp_path / "out.png")
    assert not result.success
    assert result.message == NO_IMAGE_MESSAGE
    assert settings.get_output_dir() is None


def test_load_filter_and_save(settings, photo, tmp_path):
    session = EditSession(settings=settings)
    assert session.load_image(photo)
    assert session.source_path == photo
    assert settings.get_input_dir() == str(photo.parent.resolve())
    sepia = session.processed_image

    session.choose_filter("gaussian_blur")
    session.set_slider("radius", 0.01)
    assert session.pipeline.applied_parameters == {ParameterKind.RADIUS: pytest.approx(2.0)}
    assert not np.array_equal(session.processed_image, sepia)

    target = tmp_path / "out" / "blurred.png"
    result = session.save(target)
    assert result.success, result.message
    assert target.exists()
    assert settings.get_output_dir() == str(target.parent.resolve())


def test_unreadable_file_leaves_session_unchanged(settings, photo, tmp_path):
    session = EditSession(settings=settings)
    session.load_image(photo)
    before = session.processed_image

    bogus = tmp_path / "not_an_image.png"
    bogus.write_bytes(b"nope")
    assert session.load_image(bogus) is False
    assert session.source_path == photo
    assert session.processed_image is before


def test_set_image_uses_buffer(settings, gradient_image):
    session = EditSession(settings=settings)
    session.set_image(gradient_image)
    assert session.source_path is None
    assert session.processed_image.shape == gradient_image.shape


def test_choose_unknown_filter(settings):
    session = EditSession(settings=settings)
    with pytest.raises(KeyError):
        session.choose_filter("lomo")
