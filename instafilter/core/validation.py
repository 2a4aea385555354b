"""
Validation engine for saving a filtered image.

Structured validation rules that must pass before a save.
Returns ValidationIssue list; ERROR severity blocks the save.
"""

from pathlib import Path
from typing import Any, List, Optional

from .types import ValidationIssue, ValidationSeverity
from ..oiio import OiioAdapter

NO_IMAGE_MESSAGE = "Please select an image to filter"


class ValidationEngine:
    """Validates save requests."""

    @staticmethod
    def validate_save(output_image: Optional[Any], path: Optional[str]) -> List[ValidationIssue]:
        """
        Validate that a processed image can be written to path.

        Returns list of ValidationIssue; the save is blocked if any ERROR present.
        """
        issues = []

        # 1. Something to save
        issues.extend(ValidationEngine._validate_output_image(output_image))

        # 2. Destination; a blocked save must not leave directories behind
        issues.extend(
            ValidationEngine._validate_output_path(path, create_dirs=not ValidationEngine.has_errors(issues))
        )

        return issues

    @staticmethod
    def has_errors(issues: List[ValidationIssue]) -> bool:
        return any(i.severity == ValidationSeverity.ERROR for i in issues)

    @staticmethod
    def _validate_output_image(output_image: Optional[Any]) -> List[ValidationIssue]:
        """A save needs a processed image."""
        if output_image is None:
            return [
                ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="NO_PROCESSED_IMAGE",
                    message=NO_IMAGE_MESSAGE,
                    context={},
                )
            ]
        return []

    @staticmethod
    def _validate_output_path(path: Optional[str], create_dirs: bool = True) -> List[ValidationIssue]:
        """Validate output path and file format."""
        issues = []

        if not path:
            issues.append(
                ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_OUTPUT_PATH",
                    message="Output path not specified.",
                    context={},
                )
            )
            return issues

        output_path = Path(path)
        if not OiioAdapter.supports_output(output_path):
            issues.append(
                ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="UNSUPPORTED_FORMAT",
                    message=f"Cannot write images with extension '{output_path.suffix}'.",
                    context={"path": str(output_path)},
                )
            )
            return issues

        output_dir = output_path.parent
        if create_dirs and not output_dir.exists():
            try:
                output_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                issues.append(
                    ValidationIssue(
                        severity=ValidationSeverity.ERROR,
                        code="CANNOT_CREATE_OUTPUT_DIR",
                        message=f"Cannot create output directory: {e}",
                        context={"error": str(e)},
                    )
                )

        if output_path.exists():
            issues.append(
                ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="OVERWRITE_EXISTING",
                    message=f"{output_path.name} already exists and will be overwritten.",
                    context={"path": str(output_path)},
                )
            )

        return issues
