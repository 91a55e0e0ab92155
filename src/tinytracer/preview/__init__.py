"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview window
    export: 8-bit quantization and PPM/PNG export

The renderer's framebuffer is unclamped; this module owns clamping to
[0, 1], 8-bit quantization and serialization.

Example:
    >>> from tinytracer.preview import save_ppm
    >>> save_ppm(framebuffer, "out.ppm")
"""

from tinytracer.preview.display import show_preview
from tinytracer.preview.export import (
    compute_rmse,
    framebuffer_to_uint8,
    save_image,
    save_png,
    save_ppm,
)

__all__ = [
    "show_preview",
    "framebuffer_to_uint8",
    "save_ppm",
    "save_png",
    "save_image",
    "compute_rmse",
]
