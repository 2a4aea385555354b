"""
Processing executor - evaluates a filter against a source image.

The executor is the opaque evaluator behind the pipeline: it reads the
filter's native parameter values and returns a new pixel array, or None
when the filter cannot produce output. It never raises.
"""

import logging
import math
from typing import Any, Optional

import numpy as np
import OpenImageIO as oiio

from ..core import ParameterKind
from ..oiio import OiioAdapter
from .filters import (
    ProcessingFilter,
    CrystallizeFilter,
    EdgesFilter,
    GaussianBlurFilter,
    PixellateFilter,
    SepiaToneFilter,
    UnsharpMaskFilter,
    VignetteFilter,
)

logger = logging.getLogger(__name__)

# Rows produce R, G, B from (R, G, B)
SEPIA_MATRIX = np.array(
    [
        [0.393, 0.769, 0.189],
        [0.349, 0.686, 0.168],
        [0.272, 0.534, 0.131],
    ],
    dtype=np.float32,
)

# A hard 0 -> 1 step has a central difference of 0.5
EDGE_GAIN = 2.0

CRYSTALLIZE_SEED = 1729

# Wider blurs run at reduced resolution
MAX_DIRECT_SIGMA = 4.0


def as_pixels(image: Any) -> np.ndarray:
    """
    Coerce an image buffer to a float32 (height, width, channels) array in [0, 1].

    Accepts float arrays as-is, rescales 8- and 16-bit integer arrays and
    treats 2D arrays as single-channel. Raises ValueError for anything that
    is not a decodable pixel buffer with a non-empty extent.
    """
    pixels = np.asarray(image)
    if pixels.dtype == np.uint8:
        pixels = pixels.astype(np.float32) / 255.0
    elif pixels.dtype == np.uint16:
        pixels = pixels.astype(np.float32) / 65535.0
    elif np.issubdtype(pixels.dtype, np.floating):
        pixels = pixels.astype(np.float32)
    else:
        raise ValueError(f"Unsupported pixel type: {pixels.dtype}")

    if pixels.ndim == 2:
        pixels = pixels[:, :, np.newaxis]
    if pixels.ndim != 3 or pixels.shape[2] not in (1, 2, 3, 4):
        raise ValueError(f"Unsupported image shape: {pixels.shape}")
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise ValueError("Image has an empty extent")
    if not np.all(np.isfinite(pixels)):
        raise ValueError("Image contains non-finite values")
    return pixels


def _split_alpha(pixels: np.ndarray) -> tuple[np.ndarray, Optional[np.ndarray]]:
    """Separate colour channels from a trailing alpha channel."""
    if pixels.shape[2] in (2, 4):
        return pixels[:, :, :-1], pixels[:, :, -1:]
    return pixels, None


def _merge_alpha(color: np.ndarray, alpha: Optional[np.ndarray]) -> np.ndarray:
    if alpha is None:
        return color
    return np.concatenate([color, alpha], axis=2)


class ProcessingExecutor:
    """Evaluates processing filters on pixel arrays."""

    def execute(self, image: Any, filter: ProcessingFilter) -> Optional[np.ndarray]:
        """
        Apply a filter to an image.

        Args:
            image: Source pixel buffer (see as_pixels)
            filter: Filter with native parameter values already set

        Returns:
            New float32 pixel array, or None if the filter produced no output
        """
        try:
            pixels = as_pixels(image)

            # Validate filter parameters
            is_valid, errors = filter.validate_parameters()
            if not is_valid:
                raise ValueError(f"Invalid filter parameters: {errors}")

            return self._apply_filter(pixels, filter)

        except Exception as e:
            logger.error("Failed to apply filter %s: %s", filter.name, e)
            return None

    def _apply_filter(self, pixels: np.ndarray, filter: ProcessingFilter) -> np.ndarray:
        """Dispatch to the handler for the filter type."""
        if isinstance(filter, CrystallizeFilter):
            return self._apply_crystallize(pixels, filter)

        elif isinstance(filter, EdgesFilter):
            return self._apply_edges(pixels, filter)

        elif isinstance(filter, GaussianBlurFilter):
            return self._apply_gaussian_blur(pixels, filter)

        elif isinstance(filter, PixellateFilter):
            return self._apply_pixellate(pixels, filter)

        elif isinstance(filter, SepiaToneFilter):
            return self._apply_sepia_tone(pixels, filter)

        elif isinstance(filter, UnsharpMaskFilter):
            return self._apply_unsharp_mask(pixels, filter)

        elif isinstance(filter, VignetteFilter):
            return self._apply_vignette(pixels, filter)

        else:
            raise ValueError(f"Unknown filter type: {type(filter)}")

    def _apply_crystallize(self, pixels: np.ndarray, filter: CrystallizeFilter) -> np.ndarray:
        """Fill Voronoi cells seeded on a jittered grid with the seed pixel's colour."""
        cell = max(1.0, filter.value_of(ParameterKind.RADIUS))
        height, width = pixels.shape[:2]
        grid_h = int(math.ceil(height / cell))
        grid_w = int(math.ceil(width / cell))

        rng = np.random.default_rng(CRYSTALLIZE_SEED)
        seed_y = (np.arange(grid_h)[:, np.newaxis] + rng.random((grid_h, grid_w))) * cell
        seed_x = (np.arange(grid_w)[np.newaxis, :] + rng.random((grid_h, grid_w))) * cell
        seed_y = np.minimum(seed_y, height - 1)
        seed_x = np.minimum(seed_x, width - 1)

        yy, xx = np.mgrid[0:height, 0:width].astype(np.float32)
        home_y = np.minimum((yy // cell).astype(np.intp), grid_h - 1)
        home_x = np.minimum((xx // cell).astype(np.intp), grid_w - 1)

        # The nearest seed of a jittered grid lies in one of the 3x3 neighbouring cells
        best = np.full((height, width), np.inf, dtype=np.float32)
        owner_y = home_y.copy()
        owner_x = home_x.copy()
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                ny = np.clip(home_y + dy, 0, grid_h - 1)
                nx = np.clip(home_x + dx, 0, grid_w - 1)
                dist = (yy - seed_y[ny, nx]) ** 2 + (xx - seed_x[ny, nx]) ** 2
                closer = dist < best
                best = np.where(closer, dist, best)
                owner_y = np.where(closer, ny, owner_y)
                owner_x = np.where(closer, nx, owner_x)

        sample_y = seed_y.astype(np.intp)[owner_y, owner_x]
        sample_x = seed_x.astype(np.intp)[owner_y, owner_x]
        return pixels[sample_y, sample_x].copy()

    def _apply_edges(self, pixels: np.ndarray, filter: EdgesFilter) -> np.ndarray:
        """Per-channel gradient magnitude."""
        intensity = filter.value_of(ParameterKind.INTENSITY)
        color, alpha = _split_alpha(pixels)

        padded = np.pad(color, ((1, 1), (1, 1), (0, 0)), mode="edge")
        gx = (padded[1:-1, 2:] - padded[1:-1, :-2]) * 0.5
        gy = (padded[2:, 1:-1] - padded[:-2, 1:-1]) * 0.5
        edges = np.sqrt(gx * gx + gy * gy) * (EDGE_GAIN * intensity)

        return _merge_alpha(np.clip(edges, 0.0, 1.0).astype(np.float32), alpha)

    def _apply_gaussian_blur(self, pixels: np.ndarray, filter: GaussianBlurFilter) -> np.ndarray:
        """Apply Gaussian blur."""
        return self._gaussian_blur(pixels, filter.value_of(ParameterKind.RADIUS))

    def _apply_pixellate(self, pixels: np.ndarray, filter: PixellateFilter) -> np.ndarray:
        """Replace each block with its mean colour."""
        cell = int(round(filter.value_of(ParameterKind.SCALE)))
        if cell <= 1:
            return pixels.copy()

        height, width = pixels.shape[:2]
        row_starts = np.arange(0, height, cell)
        col_starts = np.arange(0, width, cell)

        sums = np.add.reduceat(np.add.reduceat(pixels, row_starts, axis=0), col_starts, axis=1)
        counts = np.add.reduceat(
            np.add.reduceat(np.ones((height, width, 1), dtype=np.float32), row_starts, axis=0),
            col_starts,
            axis=1,
        )
        means = sums / counts

        block_y = np.arange(height) // cell
        block_x = np.arange(width) // cell
        return means[block_y][:, block_x].astype(np.float32)

    def _apply_sepia_tone(self, pixels: np.ndarray, filter: SepiaToneFilter) -> np.ndarray:
        """Blend toward the sepia colour matrix with OIIO's colormatrixtransform."""
        intensity = filter.value_of(ParameterKind.INTENSITY)
        color, alpha = _split_alpha(pixels)
        if color.shape[2] == 1:
            color = np.repeat(color, 3, axis=2)

        # Blend in matrix space; OIIO multiplies row vectors, hence the transpose
        identity = np.eye(3, dtype=np.float32)
        blend = identity + intensity * (SEPIA_MATRIX - identity)
        matrix = np.eye(4, dtype=np.float32)
        matrix[:3, :3] = blend.T

        result = oiio.ImageBufAlgo.colormatrixtransform(
            OiioAdapter.to_imagebuf(color),
            tuple(float(v) for v in matrix.flatten()),
            unpremult=False,
        )
        error = result.geterror()
        if error:
            raise RuntimeError(f"colormatrixtransform failed: {error}")

        toned = OiioAdapter.to_array(result)
        return _merge_alpha(np.clip(toned, 0.0, 1.0).astype(np.float32), alpha)

    def _apply_unsharp_mask(self, pixels: np.ndarray, filter: UnsharpMaskFilter) -> np.ndarray:
        """Apply unsharp mask."""
        intensity = filter.value_of(ParameterKind.INTENSITY)
        radius = filter.value_of(ParameterKind.RADIUS)
        if radius <= 0 or intensity <= 0:
            return pixels.copy()

        color, alpha = _split_alpha(pixels)
        if radius <= MAX_DIRECT_SIGMA:
            width = max(1.0, 4.0 * radius)
            pad = int(math.ceil(width / 2.0))
            padded = np.pad(color, ((pad, pad), (pad, pad), (0, 0)), mode="edge")
            result = oiio.ImageBufAlgo.unsharp_mask(
                OiioAdapter.to_imagebuf(padded),
                kernel="gaussian",
                width=width,
                contrast=intensity,
                threshold=0.0,
            )
            error = result.geterror()
            if error:
                raise RuntimeError(f"unsharp_mask failed: {error}")
            sharpened = OiioAdapter.to_array(result)[pad:-pad, pad:-pad]
        else:
            # Wide kernels: blur at reduced resolution, then src + amount * (src - blur)
            src = OiioAdapter.to_imagebuf(color)
            blurred = OiioAdapter.to_imagebuf(self._gaussian_blur(color, radius))
            detail = oiio.ImageBufAlgo.sub(src, blurred)
            result = oiio.ImageBufAlgo.add(src, oiio.ImageBufAlgo.mul(detail, intensity))
            error = result.geterror()
            if error:
                raise RuntimeError(f"unsharp_mask failed: {error}")
            sharpened = OiioAdapter.to_array(result)

        return _merge_alpha(np.clip(sharpened, 0.0, 1.0).astype(np.float32), alpha)

    def _apply_vignette(self, pixels: np.ndarray, filter: VignetteFilter) -> np.ndarray:
        """Darken toward the corners, leaving a centred disc untouched."""
        intensity = filter.value_of(ParameterKind.INTENSITY)
        radius = filter.value_of(ParameterKind.RADIUS)
        color, alpha = _split_alpha(pixels)

        height, width = pixels.shape[:2]
        cy = (height - 1) / 2.0
        cx = (width - 1) / 2.0
        yy, xx = np.mgrid[0:height, 0:width].astype(np.float32)
        # 0 at the centre, 1 at the corners
        dist = np.hypot(yy - cy, xx - cx) / max(math.hypot(cy, cx), 1e-6)

        start = min(radius / 2.0, 1.0)
        t = np.clip((dist - start) / max(1.0 - start, 1e-6), 0.0, 1.0)
        falloff = t * t * (3.0 - 2.0 * t)
        gain = (1.0 - intensity * falloff)[:, :, np.newaxis]

        return _merge_alpha((color * gain).astype(np.float32), alpha)

    def _gaussian_blur(self, pixels: np.ndarray, sigma: float) -> np.ndarray:
        """
        Separable Gaussian blur through OIIO with clamped edges.

        Radius 0 returns an unmodified copy. Above MAX_DIRECT_SIGMA the image
        is blurred at reduced resolution and resized back, so the kernel
        never grows beyond a few dozen taps.
        """
        if sigma <= 0:
            return pixels.copy()

        # OIIO's gaussian kernel of width w has a standard deviation of w / 4
        width = max(1.0, 4.0 * sigma)
        pad = int(math.ceil(width / 2.0))
        padded = np.pad(pixels, ((pad, pad), (pad, pad), (0, 0)), mode="edge")
        full_h, full_w, nchannels = padded.shape

        buf = OiioAdapter.to_imagebuf(padded)
        step = int(math.ceil(sigma / MAX_DIRECT_SIGMA))
        if step > 1:
            small_roi = oiio.ROI(0, max(1, full_w // step), 0, max(1, full_h // step), 0, 1, 0, nchannels)
            small = self._resize(buf, "box", small_roi)
            small = self._convolve_separable(small, width / step)
            full_roi = oiio.ROI(0, full_w, 0, full_h, 0, 1, 0, nchannels)
            buf = self._resize(small, "triangle", full_roi)
        else:
            buf = self._convolve_separable(buf, width)

        return OiioAdapter.to_array(buf)[pad:-pad, pad:-pad]

    @staticmethod
    def _convolve_separable(buf: oiio.ImageBuf, width: float) -> oiio.ImageBuf:
        for kernel_w, kernel_h in ((width, 1.0), (1.0, width)):
            kernel = oiio.ImageBufAlgo.make_kernel("gaussian", kernel_w, kernel_h)
            buf = oiio.ImageBufAlgo.convolve(buf, kernel)
            error = buf.geterror()
            if error:
                raise RuntimeError(f"convolve failed: {error}")
        return buf

    @staticmethod
    def _resize(buf: oiio.ImageBuf, filtername: str, roi: oiio.ROI) -> oiio.ImageBuf:
        result = oiio.ImageBufAlgo.resize(buf, filtername=filtername, roi=roi)
        error = result.geterror()
        if error:
            raise RuntimeError(f"resize failed: {error}")
        return result
