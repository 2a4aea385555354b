"""
Saving processed images.

The saver is the only place a missing output becomes a user-visible
message: attempting to save with nothing processed reports
"Please select an image to filter" instead of failing.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np

from ..core import SaveResult, ValidationEngine, ValidationSeverity
from ..oiio import OiioAdapter

logger = logging.getLogger(__name__)

SuccessHandler = Callable[[Path], None]
ErrorHandler = Callable[[Exception], None]


def _log_success(path: Path) -> None:
    logger.info("Saved %s", path)


def _log_error(error: Exception) -> None:
    logger.error("Save failed: %s", error)


class ImageSaver:
    """Writes processed images and reports the outcome through handlers."""

    def __init__(
        self,
        success_handler: Optional[SuccessHandler] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.success_handler = success_handler or _log_success
        self.error_handler = error_handler or _log_error

    def save(self, image: Optional[np.ndarray], path: Optional[Union[str, Path]]) -> SaveResult:
        """
        Validate and write image to path.

        Validation errors (including a missing image) are returned as a failed
        SaveResult carrying the user-facing message; they are not raised and do
        not reach the error handler. Write failures go to the error handler.
        """
        issues = ValidationEngine.validate_save(image, str(path) if path else None)
        for issue in issues:
            if issue.severity == ValidationSeverity.WARNING:
                logger.warning("%s", issue)

        if ValidationEngine.has_errors(issues):
            errors = [i for i in issues if i.severity == ValidationSeverity.ERROR]
            logger.info("Save blocked: %s", errors[0])
            return SaveResult(success=False, message=errors[0].message, issues=issues)

        output_path = Path(path)
        try:
            OiioAdapter.save_image(output_path, image)
        except RuntimeError as e:
            self.error_handler(e)
            return SaveResult(
                success=False,
                message=f"Oops: {e}",
                path=str(output_path),
                issues=issues,
            )

        self.success_handler(output_path)
        return SaveResult(success=True, message="Success!", path=str(output_path), issues=issues)
