"""
Normalized-to-native parameter mapping.

Sliders are normalized to [0, 1]. Each (filter, parameter kind) pair has a
scale factor converting that value into the filter's native unit:
native = normalized * factor. Factors are configuration; the defaults below
can be overridden per pair from settings.
"""

import math
from typing import Dict, Iterator, Mapping, Optional, Tuple

from ..core import ParameterKind
from .filters import FILTER_REGISTRY, ProcessingFilter, create_filter

ScaleKey = Tuple[str, ParameterKind]

DEFAULT_SCALE_FACTORS: Dict[ScaleKey, float] = {
    ("crystallize", ParameterKind.RADIUS): 200.0,
    ("edges", ParameterKind.INTENSITY): 1.0,
    ("gaussian_blur", ParameterKind.RADIUS): 200.0,
    ("pixellate", ParameterKind.SCALE): 50.0,
    ("sepia_tone", ParameterKind.INTENSITY): 1.0,
    ("unsharp_mask", ParameterKind.INTENSITY): 1.0,
    ("unsharp_mask", ParameterKind.RADIUS): 200.0,
    ("vignette", ParameterKind.INTENSITY): 1.0,
    ("vignette", ParameterKind.RADIUS): 2.0,
}


def parse_scale_key(key: str) -> ScaleKey:
    """Parse 'filter_id.kind' into a table key. Raises ValueError."""
    filter_id, sep, kind_name = key.strip().rpartition(".")
    if not sep or not filter_id:
        raise ValueError(f"Scale factor key must look like 'filter.kind', got {key!r}")
    return filter_id.lower(), ParameterKind.parse(kind_name)


class ScaleTable:
    """Lookup table of scale factors keyed by (filter_id, kind)."""

    def __init__(self, factors: Optional[Mapping[ScaleKey, float]] = None):
        self._factors: Dict[ScaleKey, float] = dict(
            DEFAULT_SCALE_FACTORS if factors is None else factors
        )

    def factor(self, filter_id: str, kind: ParameterKind) -> float:
        """Scale factor for a pair. Raises KeyError when the table has none."""
        try:
            return self._factors[(filter_id, kind)]
        except KeyError:
            raise KeyError(f"No scale factor for {filter_id}.{kind.value}") from None

    def native_value(self, filter_obj: ProcessingFilter, kind: ParameterKind, normalized: float) -> float:
        """Map a normalized slider value to the filter's native unit."""
        return normalized * self.factor(filter_obj.filter_id, kind)

    def with_overrides(self, overrides: Mapping[str, float]) -> "ScaleTable":
        """
        Return a copy with 'filter_id.kind' entries replaced.

        Each override must name a registered filter and a kind it declares,
        and must keep the mapped range inside the parameter's native range.
        """
        factors = dict(self._factors)
        for key, raw in overrides.items():
            filter_id, kind = parse_scale_key(key)
            filter_obj = create_filter(filter_id)
            if filter_obj is None:
                raise ValueError(f"Unknown filter in scale factor {key!r}")
            param = filter_obj.get_parameter(kind)
            if param is None:
                raise ValueError(f"{filter_obj.name} has no {kind.value} parameter")

            value = float(raw)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"Scale factor {key!r} must be a positive number, got {raw!r}")
            if value > param.max_val:
                raise ValueError(
                    f"Scale factor {key!r}={value} exceeds the native maximum {param.max_val}"
                )
            factors[(filter_id, kind)] = value
        return ScaleTable(factors)

    def missing_keys(self) -> list[ScaleKey]:
        """Declared (filter, kind) pairs the table cannot map."""
        missing = []
        for filter_id, filter_class in FILTER_REGISTRY.items():
            for kind in filter_class().accepted_kinds:
                if (filter_id, kind) not in self._factors:
                    missing.append((filter_id, kind))
        return missing

    def __contains__(self, key: ScaleKey) -> bool:
        return key in self._factors

    def __iter__(self) -> Iterator[ScaleKey]:
        return iter(self._factors)

    def __len__(self) -> int:
        return len(self._factors)
