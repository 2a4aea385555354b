"""
Processing system for Instafilter.

Filters are declared with the parameter kinds they accept; the pipeline maps
normalized slider values to native units through a scale table and the
executor evaluates the selected filter against the source image.
"""

from .pipeline import FilterPipeline, PipelineState, RenderRequest
from .filters import (
    ProcessingFilter,
    FilterParameter,
    CrystallizeFilter,
    EdgesFilter,
    GaussianBlurFilter,
    PixellateFilter,
    SepiaToneFilter,
    UnsharpMaskFilter,
    VignetteFilter,
)
from .executor import ProcessingExecutor, as_pixels
from .filters import (
    create_filter,
    list_filters,
    resolve_filter,
    DEFAULT_FILTER_ID,
    FILTER_REGISTRY,
)
from .scaling import ScaleTable, DEFAULT_SCALE_FACTORS

__all__ = [
    "FilterPipeline",
    "PipelineState",
    "RenderRequest",
    "ProcessingFilter",
    "FilterParameter",
    "ProcessingExecutor",
    "ScaleTable",
    "DEFAULT_SCALE_FACTORS",
    # Helpers
    "as_pixels",
    "create_filter",
    "list_filters",
    "resolve_filter",
    "DEFAULT_FILTER_ID",
    "FILTER_REGISTRY",
    # Filters
    "CrystallizeFilter",
    "EdgesFilter",
    "GaussianBlurFilter",
    "PixellateFilter",
    "SepiaToneFilter",
    "UnsharpMaskFilter",
    "VignetteFilter",
]
