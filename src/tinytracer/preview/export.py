"""Image export utilities for rendered framebuffers.

The renderer produces unclamped linear floats. Encoding clamps each channel
to [0, 1], scales by 255 and truncates to an 8-bit value; there is no tone
mapping and no gamma correction.

Supported formats:
    - PPM (binary P6 via Pillow): header "P6\\n<width> <height>\\n255\\n"
      followed by width * height RGB byte triples, row-major, top row first
    - PNG (8-bit via Pillow)

Example:
    >>> from tinytracer.preview.export import save_ppm
    >>> from tinytracer.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(1024, 768)
    >>> renderer.render()
    >>> save_ppm(renderer.get_framebuffer(), "out.ppm")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def _check_framebuffer_shape(framebuffer: npt.NDArray[np.floating[npt.NBitBase]]) -> None:
    """Raise if the array is not an (H, W, 3) image."""
    if framebuffer.ndim != 3 or framebuffer.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) framebuffer, got shape {framebuffer.shape}")


def framebuffer_to_uint8(
    framebuffer: npt.NDArray[np.floating[npt.NBitBase]],
) -> npt.NDArray[np.uint8]:
    """Clamp a float framebuffer to [0, 1] and quantize it to 8 bits.

    Values are truncated, not rounded: 0.5 becomes 127. Non-finite values
    become 0.

    Args:
        framebuffer: Float image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the array is not (H, W, 3).
    """
    _check_framebuffer_shape(framebuffer)

    image = np.nan_to_num(framebuffer.astype(np.float32), nan=0.0, posinf=1.0, neginf=0.0)
    image = np.clip(image, 0.0, 1.0)
    return (255.0 * image).astype(np.uint8)


def save_ppm(
    framebuffer: npt.NDArray[np.floating[npt.NBitBase]],
    filepath: str,
) -> None:
    """Save a float framebuffer as a binary PPM (P6) file.

    Args:
        framebuffer: Float image array of shape (H, W, 3), row 0 at the top.
        filepath: Output file path.
    """
    image_uint8 = framebuffer_to_uint8(framebuffer)
    PILImage.fromarray(image_uint8).save(filepath, format="PPM")


def save_png(
    framebuffer: npt.NDArray[np.floating[npt.NBitBase]],
    filepath: str,
) -> None:
    """Save a float framebuffer as an 8-bit PNG file.

    Args:
        framebuffer: Float image array of shape (H, W, 3), row 0 at the top.
        filepath: Output file path.
    """
    image_uint8 = framebuffer_to_uint8(framebuffer)
    PILImage.fromarray(image_uint8).save(filepath, format="PNG")


def save_image(
    framebuffer: npt.NDArray[np.floating[npt.NBitBase]],
    filepath: str,
) -> None:
    """Save a framebuffer, choosing PPM or PNG from the file extension.

    Raises:
        ValueError: If the extension is neither .ppm nor .png.
    """
    lowered = filepath.lower()
    if lowered.endswith(".ppm"):
        save_ppm(framebuffer, filepath)
    elif lowered.endswith(".png"):
        save_png(framebuffer, filepath)
    else:
        raise ValueError(f"Unsupported output format: {filepath} (use .ppm or .png)")


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
