"""Matplotlib-based preview of rendered framebuffers.

Example:
    >>> from tinytracer.preview.display import show_preview
    >>> from tinytracer.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(1024, 768)
    >>> renderer.render()
    >>> show_preview(renderer.get_framebuffer())
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from tinytracer.preview.export import framebuffer_to_uint8


def show_preview(
    framebuffer: npt.NDArray[np.floating[npt.NBitBase]],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (10.24, 7.68),
    block: bool = True,
) -> None:
    """Display a framebuffer in a Matplotlib window.

    The image is shown exactly as it would be encoded: clamped to [0, 1]
    and quantized to 8 bits.

    Args:
        framebuffer: Float image array of shape (H, W, 3).
        title: Custom title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    image = framebuffer_to_uint8(framebuffer)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(image)
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {image.shape[1]}x{image.shape[0]}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
