"""
Instafilter — photo filters driven by normalized sliders.

Pick an image, choose one of seven filters, move the intensity/radius/scale
sliders and save the result. See FilterPipeline for the re-render core.
"""

__version__ = "1.0.0"
