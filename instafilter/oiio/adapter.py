"""
OpenImageIO adapter for decoding, encoding and buffer conversion.

Pixels cross the rest of the package as float32 numpy arrays shaped
(height, width, channels) with values in [0, 1]. This module is the only
place that talks to ImageInput/ImageOutput directly.
"""

import logging
import threading
from pathlib import Path
from typing import Optional, Union

import numpy as np
import OpenImageIO as oiio

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Extensions written as half float; everything else is 8-bit.
_FLOAT_FORMATS = {".exr"}


class OiioAdapter:
    """Thin wrapper around the OIIO bindings."""

    # OIIO writers are serialized; ImageOutput plugins may not be thread-safe
    _oiio_lock = threading.Lock()

    @staticmethod
    def load_image(filepath: PathLike) -> Optional[np.ndarray]:
        """
        Decode an image file into a float32 (height, width, channels) array.
        Returns None if the file cannot be read.
        """
        inp = oiio.ImageInput.open(str(filepath))
        if not inp:
            logger.warning("Cannot open %s: %s", filepath, oiio.geterror())
            return None

        try:
            spec = inp.spec()
            pixels = inp.read_image(oiio.FLOAT)
            if pixels is None:
                logger.warning("Cannot read pixels from %s: %s", filepath, inp.geterror())
                return None
        finally:
            inp.close()

        pixels = np.asarray(pixels, dtype=np.float32)
        if pixels.ndim == 2:
            pixels = pixels[:, :, np.newaxis]
        logger.debug(
            "Loaded %s (%dx%d, %d channels)", filepath, spec.width, spec.height, spec.nchannels
        )
        return pixels

    @staticmethod
    def save_image(filepath: PathLike, pixels: np.ndarray) -> None:
        """
        Encode pixels to filepath. The file format follows the extension.
        Raises RuntimeError if the image cannot be written.
        """
        output_path = Path(filepath).resolve()
        pixels = np.ascontiguousarray(pixels, dtype=np.float32)
        if pixels.ndim == 2:
            pixels = pixels[:, :, np.newaxis]
        height, width, nchannels = pixels.shape

        fmt = oiio.HALF if output_path.suffix.lower() in _FLOAT_FORMATS else oiio.UINT8
        out_spec = oiio.ImageSpec(width, height, nchannels, fmt)
        if fmt == oiio.UINT8:
            pixels = np.clip(pixels, 0.0, 1.0)

        output_path_str = str(output_path).replace("\\", "/")
        out = None
        with OiioAdapter._oiio_lock:
            try:
                out = oiio.ImageOutput.create(output_path_str)
                if not out:
                    raise RuntimeError(f"No image writer for {output_path.name}: {oiio.geterror()}")

                if not out.open(output_path_str, out_spec):
                    raise RuntimeError(f"out.open failed: OIIO error: {out.geterror()}")

                if not out.write_image(pixels):
                    raise RuntimeError(f"write_image failed: OIIO error: {out.geterror()}")
            finally:
                if out:
                    out.close()

        logger.debug("Wrote %s (%dx%d, %d channels)", output_path, width, height, nchannels)

    @staticmethod
    def supports_output(filepath: PathLike) -> bool:
        """True if OIIO has a writer for the file's extension."""
        suffix = Path(filepath).suffix
        if not suffix:
            return False
        out = oiio.ImageOutput.create(str(filepath))
        if not out:
            # clear the pending global error so it does not leak into later messages
            oiio.geterror()
            return False
        return True

    @staticmethod
    def to_imagebuf(pixels: np.ndarray) -> oiio.ImageBuf:
        """Wrap a float array in a new ImageBuf."""
        height, width, nchannels = pixels.shape
        buf = oiio.ImageBuf(oiio.ImageSpec(width, height, nchannels, oiio.FLOAT))
        if not buf.set_pixels(oiio.ROI.All, np.ascontiguousarray(pixels, dtype=np.float32)):
            raise RuntimeError(f"set_pixels failed: {buf.geterror()}")
        return buf

    @staticmethod
    def to_array(buf: oiio.ImageBuf) -> np.ndarray:
        """Read an ImageBuf back into a float32 (height, width, channels) array."""
        pixels = buf.get_pixels(oiio.FLOAT)
        if pixels is None:
            raise RuntimeError(f"get_pixels failed: {buf.geterror()}")
        pixels = np.asarray(pixels, dtype=np.float32)
        if pixels.ndim == 2:
            pixels = pixels[:, :, np.newaxis]
        return pixels

    @staticmethod
    def get_oiio_version() -> str:
        """Return OIIO version string."""
        return str(getattr(oiio, "__version__", "unknown"))
