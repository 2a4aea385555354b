"""
Core data types for Instafilter.

All types use @dataclass and Enum for structured representations.
No loose dicts at the internal API boundary.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class ParameterKind(Enum):
    """The fixed set of slider-controlled filter parameters."""
    INTENSITY = "intensity"
    RADIUS = "radius"
    SCALE = "scale"

    @classmethod
    def parse(cls, kind: Union["ParameterKind", str]) -> "ParameterKind":
        """Accept a ParameterKind or its name/value in any case."""
        if isinstance(kind, cls):
            return kind
        if isinstance(kind, str):
            key = kind.strip().lower()
            for member in cls:
                if member.value == key:
                    return member
        raise ValueError(f"Unknown parameter kind: {kind!r}")


class ValidationSeverity(Enum):
    """Validation issue severity."""
    ERROR = "error"
    WARNING = "warning"


@dataclass
class ValidationIssue:
    """A validation problem."""
    severity: ValidationSeverity
    code: str
    message: str
    context: dict = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.severity.name}] {self.code}: {self.message}"


@dataclass
class SaveResult:
    """Outcome of a save attempt, as reported to the user."""
    success: bool
    message: str
    path: Optional[str] = None
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]
