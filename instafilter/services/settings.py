"""
Settings management for Instafilter.

Handles persistent storage of user preferences in settings.ini, including
per-filter scale factor overrides:

    [scale_factors]
    pixellate.scale = 10
"""

from configparser import ConfigParser, Error as ConfigError
from pathlib import Path
from typing import Dict, Optional, Union

from ..processing import DEFAULT_FILTER_ID, FILTER_REGISTRY, ScaleTable
from ..processing.pipeline import DEFAULT_VALUE


class Settings:
    """Manages application settings via settings.ini."""

    # Settings file location (project root)
    SETTINGS_FILE = Path(__file__).parent.parent.parent / "settings.ini"

    # Section and keys
    SECTION = "preferences"
    SCALE_SECTION = "scale_factors"
    KEY_INPUT_DIR = "last_input_dir"
    KEY_OUTPUT_DIR = "last_output_dir"
    KEY_DEFAULT_FILTER = "default_filter"
    KEY_DEFAULT_VALUE = "default_value"

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """Initialize settings from file or create defaults."""
        self.path = Path(path) if path is not None else self.SETTINGS_FILE
        self.config = ConfigParser()
        self._load()

    def _load(self) -> None:
        """Load settings from file or create defaults. Raises ValueError if unparseable."""
        if self.path.exists():
            try:
                self.config.read(self.path)
            except ConfigError as e:
                raise ValueError(f"Cannot parse {self.path}: {e}") from e
            if not self.config.has_section(self.SECTION):
                self.config.add_section(self.SECTION)
        else:
            # Create default section
            self.config.add_section(self.SECTION)
            self.config.set(self.SECTION, self.KEY_INPUT_DIR, "")
            self.config.set(self.SECTION, self.KEY_OUTPUT_DIR, "")
            self.config.set(self.SECTION, self.KEY_DEFAULT_FILTER, DEFAULT_FILTER_ID)
            self.config.set(self.SECTION, self.KEY_DEFAULT_VALUE, str(DEFAULT_VALUE))
            self.config.add_section(self.SCALE_SECTION)
            self._save()

    def _save(self) -> None:
        """Save settings to file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            self.config.write(f)

    def _get(self, key: str) -> Optional[str]:
        try:
            val = self.config.get(self.SECTION, key)
        except ConfigError:
            return None
        return val if val else None

    def _set(self, key: str, value: str) -> None:
        self.config.set(self.SECTION, key, value)
        self._save()

    def get_input_dir(self) -> Optional[str]:
        """Get last input directory."""
        return self._get(self.KEY_INPUT_DIR)

    def set_input_dir(self, path: str) -> None:
        """Set and save last input directory."""
        self._set(self.KEY_INPUT_DIR, path)

    def get_output_dir(self) -> Optional[str]:
        """Get last output directory."""
        return self._get(self.KEY_OUTPUT_DIR)

    def set_output_dir(self, path: str) -> None:
        """Set and save last output directory."""
        self._set(self.KEY_OUTPUT_DIR, path)

    def get_default_filter(self) -> str:
        """Filter selected at session start (default: sepia_tone)."""
        filter_id = self._get(self.KEY_DEFAULT_FILTER)
        if filter_id not in FILTER_REGISTRY:
            return DEFAULT_FILTER_ID
        return filter_id

    def set_default_filter(self, filter_id: str) -> None:
        """Set and save the session-start filter."""
        if filter_id not in FILTER_REGISTRY:
            raise ValueError(f"Unknown filter: {filter_id!r}")
        self._set(self.KEY_DEFAULT_FILTER, filter_id)

    def get_default_value(self) -> float:
        """Initial slider position (default: 0.5)."""
        try:
            value = self.config.getfloat(self.SECTION, self.KEY_DEFAULT_VALUE)
        except (ConfigError, ValueError):
            return DEFAULT_VALUE
        if not 0.0 <= value <= 1.0:
            return DEFAULT_VALUE
        return value

    def get_scale_overrides(self) -> Dict[str, float]:
        """Raw [scale_factors] entries; values are validated by the scale table."""
        if not self.config.has_section(self.SCALE_SECTION):
            return {}
        overrides = {}
        for key, raw in self.config.items(self.SCALE_SECTION):
            try:
                overrides[key] = float(raw)
            except ValueError:
                raise ValueError(f"Scale factor {key!r} is not a number: {raw!r}") from None
        return overrides

    def set_scale_factor(self, key: str, factor: float) -> None:
        """Set and save a 'filter_id.kind' scale factor override."""
        # validate before persisting
        ScaleTable().with_overrides({key: factor})
        if not self.config.has_section(self.SCALE_SECTION):
            self.config.add_section(self.SCALE_SECTION)
        self.config.set(self.SCALE_SECTION, key, str(factor))
        self._save()

    def scale_table(self) -> ScaleTable:
        """Default scale table with this file's overrides applied."""
        return ScaleTable().with_overrides(self.get_scale_overrides())
