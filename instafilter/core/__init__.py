"""Core types and validation for Instafilter."""

from .types import (
    ParameterKind,
    SaveResult,
    ValidationIssue,
    ValidationSeverity,
)
from .validation import ValidationEngine, NO_IMAGE_MESSAGE

__all__ = [
    "ParameterKind",
    "SaveResult",
    "ValidationIssue",
    "ValidationSeverity",
    "ValidationEngine",
    "NO_IMAGE_MESSAGE",
]
