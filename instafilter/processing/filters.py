"""
Filter definitions for the processing pipeline.

Each filter declares the parameter kinds it accepts together with their
native ranges. The declared set is the filter's capability table: the
pipeline only ever sets parameters listed here.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from numbers import Real
from typing import Dict, List, Optional, Union

from ..core import ParameterKind


@dataclass
class FilterParameter:
    """A single native-unit parameter of a filter."""
    kind: ParameterKind
    value: float
    min_val: float = 0.0
    max_val: float = 1.0
    description: str = ""

    def validate(self) -> tuple[bool, str]:
        """Validate parameter value. Returns (is_valid, error_message)."""
        name = self.kind.value
        if isinstance(self.value, bool) or not isinstance(self.value, Real):
            return False, f"{name} must be a number"
        if self.value < self.min_val:
            return False, f"{name} must be >= {self.min_val}"
        if self.value > self.max_val:
            return False, f"{name} must be <= {self.max_val}"
        return True, ""


@dataclass
class ProcessingFilter:
    """Base class for all processing filters."""
    filter_id: str
    name: str
    category: str
    parameters: Dict[ParameterKind, FilterParameter] = field(default_factory=dict)

    @property
    def accepted_kinds(self) -> frozenset:
        return frozenset(self.parameters)

    def accepts(self, kind: ParameterKind) -> bool:
        """True if the filter consumes this parameter kind."""
        return kind in self.parameters

    def validate_parameters(self) -> tuple[bool, List[str]]:
        """Validate all parameters. Returns (is_valid, list_of_errors)."""
        errors = []
        for param in self.parameters.values():
            is_valid, error_msg = param.validate()
            if not is_valid:
                errors.append(error_msg)
        return len(errors) == 0, errors

    def get_parameter(self, kind: ParameterKind) -> Optional[FilterParameter]:
        """Get a parameter by kind."""
        return self.parameters.get(kind)

    def value_of(self, kind: ParameterKind) -> float:
        """Native value of a declared parameter."""
        return float(self.parameters[kind].value)

    def set_parameter(self, kind: ParameterKind, value: float) -> bool:
        """Set a native parameter value. Returns False if undeclared or invalid."""
        if kind not in self.parameters:
            return False
        self.parameters[kind].value = value
        is_valid, _ = self.parameters[kind].validate()
        return is_valid

    def clone(self) -> "ProcessingFilter":
        """Create a deep copy of this filter with same parameters."""
        return deepcopy(self)


# ============================================================================
# FILTER IMPLEMENTATIONS
# ============================================================================

class CrystallizeFilter(ProcessingFilter):
    """Polygonal colour cells."""

    def __init__(self):
        super().__init__(
            filter_id="crystallize",
            name="Crystallize",
            category="Stylize",
            parameters={
                ParameterKind.RADIUS: FilterParameter(
                    kind=ParameterKind.RADIUS,
                    value=20.0,
                    max_val=200.0,
                    description="Cell size in pixels",
                ),
            }
        )


class EdgesFilter(ProcessingFilter):
    """Colour edge detection."""

    def __init__(self):
        super().__init__(
            filter_id="edges",
            name="Edges",
            category="Stylize",
            parameters={
                ParameterKind.INTENSITY: FilterParameter(
                    kind=ParameterKind.INTENSITY,
                    value=1.0,
                    max_val=1.0,
                    description="Edge brightness",
                ),
            }
        )


class GaussianBlurFilter(ProcessingFilter):
    """Gaussian blur."""

    def __init__(self):
        super().__init__(
            filter_id="gaussian_blur",
            name="Gaussian Blur",
            category="Blur",
            parameters={
                ParameterKind.RADIUS: FilterParameter(
                    kind=ParameterKind.RADIUS,
                    value=10.0,
                    max_val=200.0,
                    description="Standard deviation in pixels",
                ),
            }
        )


class PixellateFilter(ProcessingFilter):
    """Square-block mosaic."""

    def __init__(self):
        super().__init__(
            filter_id="pixellate",
            name="Pixellate",
            category="Stylize",
            parameters={
                ParameterKind.SCALE: FilterParameter(
                    kind=ParameterKind.SCALE,
                    value=8.0,
                    max_val=50.0,
                    description="Block size in pixels",
                ),
            }
        )


class SepiaToneFilter(ProcessingFilter):
    """Warm brown tint."""

    def __init__(self):
        super().__init__(
            filter_id="sepia_tone",
            name="Sepia Tone",
            category="Color Effect",
            parameters={
                ParameterKind.INTENSITY: FilterParameter(
                    kind=ParameterKind.INTENSITY,
                    value=1.0,
                    max_val=1.0,
                    description="Blend between original (0) and full sepia (1)",
                ),
            }
        )


class UnsharpMaskFilter(ProcessingFilter):
    """Unsharp mask for controlled sharpening."""

    def __init__(self):
        super().__init__(
            filter_id="unsharp_mask",
            name="Unsharp Mask",
            category="Sharpen",
            parameters={
                ParameterKind.INTENSITY: FilterParameter(
                    kind=ParameterKind.INTENSITY,
                    value=0.5,
                    max_val=1.0,
                    description="Sharpening strength",
                ),
                ParameterKind.RADIUS: FilterParameter(
                    kind=ParameterKind.RADIUS,
                    value=2.5,
                    max_val=200.0,
                    description="Halo size in pixels",
                ),
            }
        )


class VignetteFilter(ProcessingFilter):
    """Darkened corners."""

    def __init__(self):
        super().__init__(
            filter_id="vignette",
            name="Vignette",
            category="Color Effect",
            parameters={
                ParameterKind.INTENSITY: FilterParameter(
                    kind=ParameterKind.INTENSITY,
                    value=0.0,
                    max_val=1.0,
                    description="Darkening at the corners",
                ),
                ParameterKind.RADIUS: FilterParameter(
                    kind=ParameterKind.RADIUS,
                    value=1.0,
                    max_val=2.0,
                    description="Size of the untouched centre (2 leaves the whole image untouched)",
                ),
            }
        )


# Registry of all available filters, in menu order
FILTER_REGISTRY = {
    "crystallize": CrystallizeFilter,
    "edges": EdgesFilter,
    "gaussian_blur": GaussianBlurFilter,
    "pixellate": PixellateFilter,
    "sepia_tone": SepiaToneFilter,
    "unsharp_mask": UnsharpMaskFilter,
    "vignette": VignetteFilter,
}

DEFAULT_FILTER_ID = "sepia_tone"


def create_filter(filter_id: str) -> Optional[ProcessingFilter]:
    """Create a filter instance by ID. Returns None if filter not found."""
    if filter_id not in FILTER_REGISTRY:
        return None
    return FILTER_REGISTRY[filter_id]()


def resolve_filter(spec: Union[ProcessingFilter, str]) -> ProcessingFilter:
    """Return spec itself, or a fresh instance for a filter ID. Raises KeyError."""
    if isinstance(spec, ProcessingFilter):
        return spec
    filter_obj = create_filter(spec)
    if filter_obj is None:
        raise KeyError(f"Unknown filter: {spec!r}")
    return filter_obj


def list_filters() -> List[ProcessingFilter]:
    """One fresh instance of every filter, in menu order."""
    return [filter_class() for filter_class in FILTER_REGISTRY.values()]
