"""Utility helpers for Instafilter."""

from .logging import configure_logging

__all__ = ["configure_logging"]
