"""Tests for the normalized-to-native scale table."""

import pytest

from instafilter.core import ParameterKind
from instafilter.processing import DEFAULT_SCALE_FACTORS, ScaleTable, create_filter
from instafilter.processing.scaling import parse_scale_key


def test_default_table_covers_every_declared_parameter():
    assert ScaleTable().missing_keys() == []


def test_default_factors():
    table = ScaleTable()
    assert table.factor("gaussian_blur", ParameterKind.RADIUS) == 200.0
    assert table.factor("crystallize", ParameterKind.RADIUS) == 200.0
    assert table.factor("pixellate", ParameterKind.SCALE) == 50.0
    assert table.factor("sepia_tone", ParameterKind.INTENSITY) == 1.0


def test_unmapped_pair_raises_key_error():
    with pytest.raises(KeyError):
        ScaleTable().factor("sepia_tone", ParameterKind.RADIUS)


@pytest.mark.parametrize("key", sorted(DEFAULT_SCALE_FACTORS, key=lambda k: (k[0], k[1].value)))
def test_slider_ends_map_inside_native_range(key):
    filter_id, kind = key
    filter_obj = create_filter(filter_id)
    param = filter_obj.get_parameter(kind)
    table = ScaleTable()

    low = table.native_value(filter_obj, kind, 0.0)
    high = table.native_value(filter_obj, kind, 1.0)

    assert low == 0.0
    assert param.min_val <= low <= high <= param.max_val
    assert filter_obj.set_parameter(kind, high)
    assert filter_obj.set_parameter(kind, low)


def test_native_value_is_linear():
    blur = create_filter("gaussian_blur")
    assert ScaleTable().native_value(blur, ParameterKind.RADIUS, 0.5) == pytest.approx(100.0)


def test_override_scale_multiplier():
    table = ScaleTable().with_overrides({"pixellate.scale": 10})
    assert table.factor("pixellate", ParameterKind.SCALE) == 10.0
    # the original is left alone
    assert ScaleTable().factor("pixellate", ParameterKind.SCALE) == 50.0


@pytest.mark.parametrize(
    "overrides",
    [
        {"lomo.radius": 2.0},
        {"sepia_tone.radius": 2.0},
        {"pixellate.scale": 0},
        {"pixellate.scale": -5},
        {"pixellate.scale": float("nan")},
        {"pixellate.scale": 500},
        {"pixellate": 10},
        {"pixellate.angle": 10},
    ],
)
def test_invalid_overrides_rejected(overrides):
    with pytest.raises(ValueError):
        ScaleTable().with_overrides(overrides)


def test_parse_scale_key():
    assert parse_scale_key(" Unsharp_Mask.RADIUS ") == ("unsharp_mask", ParameterKind.RADIUS)
