"""
Background rendering for a FilterPipeline.

Evaluation runs on a single worker thread so the caller stays responsive.
Every trigger starts a new generation; only the latest generation may
publish its result, so a burst of slider moves never interleaves partial
outputs (last write wins).
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Optional, Union

import numpy as np

from ..core import ParameterKind
from ..processing import FilterPipeline, ProcessingFilter, RenderRequest

logger = logging.getLogger(__name__)


class BackgroundRenderer:
    """Runs pipeline recomputes on a worker thread, last write wins."""

    def __init__(self, pipeline: Optional[FilterPipeline] = None):
        self.pipeline = pipeline or FilterPipeline()
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="instafilter-render")
        self._latest: Optional[Future] = None

    # ========== Triggers ==========

    def set_source_image(self, image: Any) -> Future:
        self.pipeline.stage_source_image(image)
        return self.submit()

    def select_filter(self, spec: Union[ProcessingFilter, str]) -> Future:
        self.pipeline.stage_filter(spec)
        return self.submit()

    def set_parameter(self, kind: Union[ParameterKind, str], value: float) -> Future:
        self.pipeline.stage_parameter(kind, value)
        return self.submit()

    def submit(self) -> Future:
        """Queue a recompute of the current state; supersedes anything in flight."""
        request = self.pipeline.prepare()
        if request is None:
            future: Future = Future()
            future.set_result(None)
        else:
            future = self._pool.submit(self._run, request)
        self._latest = future
        return future

    # ========== Results ==========

    @property
    def output_image(self) -> Optional[np.ndarray]:
        return self.pipeline.output_image

    def wait(self, timeout: Optional[float] = None) -> Optional[np.ndarray]:
        """Block until the latest request settles and return the visible output."""
        if self._latest is not None:
            self._latest.result(timeout=timeout)
        return self.pipeline.output_image

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> "BackgroundRenderer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    def _run(self, request: RenderRequest) -> bool:
        """Worker body: skip superseded requests, evaluate, commit."""
        if request.generation != self.pipeline.generation:
            logger.debug("Skipping superseded render %d", request.generation)
            return False
        result = self.pipeline.evaluate(request)
        return self.pipeline.commit(request, result)
