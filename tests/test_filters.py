"""Tests for the filter catalog."""

import pytest

from instafilter.core import ParameterKind
from instafilter.processing import (
    FILTER_REGISTRY,
    GaussianBlurFilter,
    create_filter,
    list_filters,
    resolve_filter,
)


EXPECTED_KINDS = {
    "crystallize": {ParameterKind.RADIUS},
    "edges": {ParameterKind.INTENSITY},
    "gaussian_blur": {ParameterKind.RADIUS},
    "pixellate": {ParameterKind.SCALE},
    "sepia_tone": {ParameterKind.INTENSITY},
    "unsharp_mask": {ParameterKind.INTENSITY, ParameterKind.RADIUS},
    "vignette": {ParameterKind.INTENSITY, ParameterKind.RADIUS},
}


def test_catalog_menu_order():
    names = [f.name for f in list_filters()]
    assert names == [
        "Crystallize",
        "Edges",
        "Gaussian Blur",
        "Pixellate",
        "Sepia Tone",
        "Unsharp Mask",
        "Vignette",
    ]


@pytest.mark.parametrize("filter_id", sorted(FILTER_REGISTRY))
def test_declared_parameter_kinds(filter_id):
    filter_obj = create_filter(filter_id)
    assert filter_obj.filter_id == filter_id
    assert set(filter_obj.accepted_kinds) == EXPECTED_KINDS[filter_id]


@pytest.mark.parametrize("filter_id", sorted(FILTER_REGISTRY))
def test_catalog_defaults_are_valid(filter_id):
    is_valid, errors = create_filter(filter_id).validate_parameters()
    assert is_valid, errors


def test_create_filter_unknown_returns_none():
    assert create_filter("lomo") is None


def test_resolve_filter():
    blur = GaussianBlurFilter()
    assert resolve_filter(blur) is blur
    assert isinstance(resolve_filter("gaussian_blur"), GaussianBlurFilter)
    with pytest.raises(KeyError):
        resolve_filter("lomo")


def test_set_undeclared_parameter_is_ignored():
    sepia = create_filter("sepia_tone")
    assert sepia.set_parameter(ParameterKind.RADIUS, 10.0) is False
    assert sepia.get_parameter(ParameterKind.RADIUS) is None
    assert set(sepia.parameters) == {ParameterKind.INTENSITY}


def test_set_parameter_outside_native_range_is_invalid():
    blur = create_filter("gaussian_blur")
    assert blur.set_parameter(ParameterKind.RADIUS, 250.0) is False
    is_valid, errors = blur.validate_parameters()
    assert not is_valid
    assert errors == ["radius must be <= 200.0"]


def test_non_numeric_value_is_invalid():
    sepia = create_filter("sepia_tone")
    sepia.parameters[ParameterKind.INTENSITY].value = "strong"
    assert sepia.validate_parameters() == (False, ["intensity must be a number"])


def test_clone_is_independent():
    unsharp = create_filter("unsharp_mask")
    copy = unsharp.clone()
    unsharp.set_parameter(ParameterKind.RADIUS, 50.0)
    assert copy.value_of(ParameterKind.RADIUS) == 2.5
    assert copy.value_of(ParameterKind.INTENSITY) == 0.5


def test_parameter_kind_parse():
    assert ParameterKind.parse("Radius") is ParameterKind.RADIUS
    assert ParameterKind.parse(ParameterKind.SCALE) is ParameterKind.SCALE
    with pytest.raises(ValueError):
        ParameterKind.parse("angle")
