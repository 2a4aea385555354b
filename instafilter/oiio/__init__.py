"""OpenImageIO bindings used by Instafilter."""

from .adapter import OiioAdapter

__all__ = ["OiioAdapter"]
