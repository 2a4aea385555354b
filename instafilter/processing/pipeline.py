"""
Processing pipeline management.

Holds the selected filter, the normalized slider values and the source
image, and re-derives the output image whenever any of them changes.
"""

import logging
import threading
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, Optional, Union

import numpy as np

from ..core import ParameterKind
from .executor import ProcessingExecutor
from .filters import DEFAULT_FILTER_ID, ProcessingFilter, resolve_filter
from .scaling import ScaleTable

logger = logging.getLogger(__name__)

DEFAULT_VALUE = 0.5


def _default_filter() -> ProcessingFilter:
    return resolve_filter(DEFAULT_FILTER_ID)


@dataclass
class PipelineState:
    """Current filter, normalized parameters and images of one session."""
    selected_filter: ProcessingFilter = field(default_factory=_default_filter)
    intensity: float = DEFAULT_VALUE
    radius: float = DEFAULT_VALUE
    scale: float = DEFAULT_VALUE
    source_image: Optional[Any] = field(default=None, repr=False)
    # Derived by FilterPipeline; never assigned by callers
    output_image: Optional[np.ndarray] = field(default=None, repr=False)

    def value(self, kind: ParameterKind) -> float:
        """Normalized value of a parameter kind."""
        return getattr(self, kind.value)

    def normalized_values(self) -> Dict[ParameterKind, float]:
        return {kind: self.value(kind) for kind in ParameterKind}


@dataclass
class RenderRequest:
    """Snapshot of what one recompute evaluates."""
    generation: int
    filter: ProcessingFilter
    source_image: Any
    applied: Dict[ParameterKind, float] = field(default_factory=dict)


def check_normalized(kind: ParameterKind, value: Any) -> float:
    """Return value as float if it is a number in [0, 1]. Raises ValueError."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"{kind.value} must be a number, got {value!r}")
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{kind.value} must be within [0, 1], got {value}")
    return value


class FilterPipeline:
    """Owns a PipelineState; every mutation goes through here and triggers a recompute."""

    def __init__(
        self,
        executor: Optional[ProcessingExecutor] = None,
        scale_table: Optional[ScaleTable] = None,
        state: Optional[PipelineState] = None,
    ):
        self.executor = executor or ProcessingExecutor()
        self.scale_table = scale_table or ScaleTable()
        missing = self.scale_table.missing_keys()
        if missing:
            logger.warning(
                "Scale table has no factor for %s",
                ", ".join(f"{filter_id}.{kind.value}" for filter_id, kind in missing),
            )
        self.state = state or PipelineState()
        self._applied: Dict[ParameterKind, float] = {}
        self._generation = 0
        self._lock = threading.Lock()

    # ========== Read access ==========

    @property
    def output_image(self) -> Optional[np.ndarray]:
        with self._lock:
            return self.state.output_image

    @property
    def source_image(self) -> Optional[Any]:
        return self.state.source_image

    @property
    def selected_filter(self) -> ProcessingFilter:
        return self.state.selected_filter

    @property
    def applied_parameters(self) -> Dict[ParameterKind, float]:
        """Native values applied to the filter by the last recompute."""
        return dict(self._applied)

    @property
    def generation(self) -> int:
        return self._generation

    # ========== Operations ==========

    def set_source_image(self, image: Any) -> Optional[np.ndarray]:
        """Replace the source image, drop the stale output and recompute."""
        self.stage_source_image(image)
        return self.recompute()

    def select_filter(self, spec: Union[ProcessingFilter, str]) -> Optional[np.ndarray]:
        """Switch filters (instance or filter ID) and recompute with the current sliders."""
        self.stage_filter(spec)
        return self.recompute()

    def set_parameter(self, kind: Union[ParameterKind, str], value: float) -> Optional[np.ndarray]:
        """Store a normalized slider value and recompute."""
        self.stage_parameter(kind, value)
        return self.recompute()

    # ========== State changes without a recompute ==========

    # Each change starts a new generation, so renders of the previous state
    # still in flight can no longer be committed.

    def stage_source_image(self, image: Any) -> None:
        with self._lock:
            self._generation += 1
            self.state.source_image = image
            self.state.output_image = None

    def stage_filter(self, spec: Union[ProcessingFilter, str]) -> None:
        # prepare() writes mapped values into the selected instance; keep the caller's untouched
        filter_obj = resolve_filter(spec).clone()
        with self._lock:
            self._generation += 1
            self.state.selected_filter = filter_obj
            self._applied = {}
        logger.debug("Selected filter %s", filter_obj.name)

    def stage_parameter(self, kind: Union[ParameterKind, str], value: float) -> None:
        kind = ParameterKind.parse(kind)
        value = check_normalized(kind, value)
        with self._lock:
            self._generation += 1
            setattr(self.state, kind.value, value)

    def recompute(self) -> Optional[np.ndarray]:
        """Re-derive the output image synchronously."""
        request = self.prepare()
        if request is None:
            return None
        result = self.evaluate(request)
        self.commit(request, result)
        return self.output_image

    # ========== Recompute stages ==========

    def prepare(self) -> Optional[RenderRequest]:
        """
        Start a new generation and apply mapped values to the selected filter.

        Only kinds the filter declares are set; the others are never touched.
        Returns None when there is no source image.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
            if self.state.source_image is None:
                self.state.output_image = None
                return None

        filter_obj = self.state.selected_filter
        applied = {}
        for kind in ParameterKind:
            if not filter_obj.accepts(kind):
                continue
            native = self.scale_table.native_value(filter_obj, kind, self.state.value(kind))
            if not filter_obj.set_parameter(kind, native):
                logger.warning("%s rejected %s=%s", filter_obj.name, kind.value, native)
            applied[kind] = native
        self._applied = applied

        return RenderRequest(
            generation=generation,
            filter=filter_obj.clone(),
            source_image=self.state.source_image,
            applied=applied,
        )

    def evaluate(self, request: RenderRequest) -> Optional[np.ndarray]:
        """Run the filter for a request. Safe to call off the caller's thread."""
        return self.executor.execute(request.source_image, request.filter)

    def commit(self, request: RenderRequest, result: Optional[np.ndarray]) -> bool:
        """
        Publish a result if its request is still the latest.

        A None result keeps the previous output. Returns True if the output
        was replaced.
        """
        with self._lock:
            if request.generation != self._generation:
                logger.debug("Dropping stale render %d (latest %d)", request.generation, self._generation)
                return False
            if result is None:
                logger.warning("%s produced no output; keeping previous image", request.filter.name)
                return False
            self.state.output_image = result
            return True
