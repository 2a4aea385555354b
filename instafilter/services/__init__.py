"""Services module initialization."""
from .settings import Settings
from .image_saver import ImageSaver
from .render_worker import BackgroundRenderer
from .edit_session import EditSession

__all__ = ["Settings", "ImageSaver", "BackgroundRenderer", "EditSession"]
