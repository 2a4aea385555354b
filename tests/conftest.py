import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]

# Make the package importable without installing it
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from instafilter.processing import as_pixels  # noqa: E402
from instafilter.services import Settings  # noqa: E402


class RecordingExecutor:
    """Evaluator stand-in: records the native parameters it sees.

    The output depends only on the filter's parameter values, so two
    evaluations with the same applied parameters give identical images.
    """

    def __init__(self):
        self.calls = []

    def execute(self, image, filter):
        params = {kind: param.value for kind, param in filter.parameters.items()}
        self.calls.append((filter.filter_id, params))
        pixels = as_pixels(image)
        return np.full(pixels.shape, float(sum(params.values())), dtype=np.float32)


class EmptyExecutor:
    """Evaluator that never produces output."""

    def __init__(self):
        self.calls = 0

    def execute(self, image, filter):
        self.calls += 1
        return None


@pytest.fixture
def recording_executor():
    return RecordingExecutor()


@pytest.fixture
def gradient_image():
    """24x32 RGB gradient with a bright square in the middle."""
    height, width = 24, 32
    img = np.zeros((height, width, 3), dtype=np.float32)
    img[:, :, 0] = np.linspace(0.0, 1.0, width)[np.newaxis, :]
    img[:, :, 1] = np.linspace(0.0, 0.5, height)[:, np.newaxis]
    img[:, :, 2] = 0.25
    img[8:16, 12:20] = 0.9
    return img


@pytest.fixture
def noise_image():
    """48x48 RGB uniform noise, fixed seed."""
    rng = np.random.default_rng(7)
    return rng.random((48, 48, 3)).astype(np.float32)


@pytest.fixture
def settings(tmp_path):
    return Settings(tmp_path / "settings.ini")
