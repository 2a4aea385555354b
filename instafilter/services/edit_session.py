"""
Edit session state management.

Central in-memory store for one editing session:
- The picked photo
- The filter pipeline (selected filter, slider values, output)
- Saving the processed result
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from ..core import ParameterKind, SaveResult
from ..oiio import OiioAdapter
from ..processing import FilterPipeline, PipelineState, ProcessingFilter, list_filters, resolve_filter
from .image_saver import ImageSaver
from .settings import Settings

logger = logging.getLogger(__name__)


class EditSession:
    """Central state for picking, filtering and saving one photo at a time."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        saver: Optional[ImageSaver] = None,
        pipeline: Optional[FilterPipeline] = None,
    ):
        self.settings = settings or Settings()
        self.saver = saver or ImageSaver()
        if pipeline is None:
            value = self.settings.get_default_value()
            pipeline = FilterPipeline(
                scale_table=self.settings.scale_table(),
                state=PipelineState(
                    selected_filter=resolve_filter(self.settings.get_default_filter()),
                    intensity=value,
                    radius=value,
                    scale=value,
                ),
            )
        self.pipeline = pipeline
        self.source_path: Optional[Path] = None

    # ========== Picking ==========

    def load_image(self, path: Union[str, Path]) -> bool:
        """
        Decode a picked file and make it the source image.
        Returns False, leaving the session unchanged, if it cannot be read.
        """
        pixels = OiioAdapter.load_image(path)
        if pixels is None:
            return False

        self.source_path = Path(path)
        self.settings.set_input_dir(str(self.source_path.parent.resolve()))
        self.pipeline.set_source_image(pixels)
        return True

    def set_image(self, pixels: np.ndarray) -> None:
        """Use an already decoded buffer as the source image."""
        self.source_path = None
        self.pipeline.set_source_image(pixels)

    # ========== Filtering ==========

    def available_filters(self) -> List[ProcessingFilter]:
        """Filters in menu order."""
        return list_filters()

    def choose_filter(self, filter_id: str) -> None:
        """Switch to a filter by ID. Raises KeyError for unknown IDs."""
        self.pipeline.select_filter(filter_id)

    def set_slider(self, kind: Union[ParameterKind, str], value: float) -> None:
        """Move one of the intensity/radius/scale sliders."""
        self.pipeline.set_parameter(kind, value)

    @property
    def filter_display_name(self) -> str:
        return self.pipeline.selected_filter.name

    @property
    def processed_image(self) -> Optional[np.ndarray]:
        return self.pipeline.output_image

    # ========== Saving ==========

    def save(self, path: Union[str, Path]) -> SaveResult:
        """Save the processed image; a missing image is reported, not raised."""
        result = self.saver.save(self.processed_image, path)
        if result.success:
            self.settings.set_output_dir(str(Path(path).parent.resolve()))
        return result
