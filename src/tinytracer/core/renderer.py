"""Render driver: fills the framebuffer and hands it to the encoders.

This module provides a convenient wrapper around the core integrator that supports:
- Rendering the image in bands of rows, with progress callbacks
- Parallel or single-threaded pixel loops
- Access to the raw float framebuffer and its 8-bit encoding
- Saving to PPM or PNG

Every pixel is computed independently and written exactly once, so the image
does not depend on the order in which bands or pixels complete.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.core.renderer import Renderer
    >>> from tinytracer.scene.default_scene import create_default_scene
    >>> from tinytracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(camera.width, camera.height)
    >>> renderer.render()
    >>> renderer.save_ppm("out.ppm")
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from tinytracer.core.integrator import (
    clear_render_target,
    get_framebuffer_numpy,
    render_rows,
    setup_render_target,
)
from tinytracer.preview.export import framebuffer_to_uint8, save_png, save_ppm

if TYPE_CHECKING:
    from tinytracer.camera.pinhole import PinholeCamera
    from tinytracer.scene.manager import SceneConfig, SceneManager

# Callback receives (rows_rendered, total_rows)
ProgressCallback = Callable[[int, int], None]

DEFAULT_ROWS_PER_BATCH = 64


class Renderer:
    """Render driver owning the framebuffer for one image size.

    The renderer delegates to the global integrator buffers (which are
    Taichi fields) and keeps track of how many rows have been rendered.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).

        Raises:
            ValueError: If dimensions are invalid.
        """
        self._width = width
        self._height = height
        self._rows_rendered = 0
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def rows_rendered(self) -> int:
        """Number of rows rendered since the last reset."""
        return self._rows_rendered

    @property
    def is_complete(self) -> bool:
        """Whether every row has been rendered."""
        return self._rows_rendered >= self._height

    def reset(self) -> None:
        """Clear the framebuffer for a new render."""
        clear_render_target()
        self._rows_rendered = 0

    def render(
        self,
        rows_per_batch: int = DEFAULT_ROWS_PER_BATCH,
        parallel: bool = True,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the whole image.

        Args:
            rows_per_batch: Number of rows rendered per kernel launch. Larger
                batches reduce launch overhead; smaller ones give more
                frequent progress updates.
            parallel: Render pixels in parallel (True) or on one thread.
            callback: Optional function called after each batch with
                (rows_rendered, total_rows).

        Example:
            >>> def progress(done, total):
            ...     print(f"Progress: {done}/{total} rows")
            >>> renderer.render(rows_per_batch=32, callback=progress)
        """
        for done, total in self.render_progressive(rows_per_batch, parallel):
            if callback is not None:
                callback(done, total)

    def render_progressive(
        self,
        rows_per_batch: int = DEFAULT_ROWS_PER_BATCH,
        parallel: bool = True,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the image band by band, yielding progress after each band.

        Args:
            rows_per_batch: Number of rows rendered per kernel launch.
            parallel: Render pixels in parallel (True) or on one thread.

        Yields:
            Tuple of (rows_rendered, total_rows).

        Raises:
            ValueError: If rows_per_batch is not positive.
        """
        if rows_per_batch <= 0:
            raise ValueError(f"rows_per_batch must be positive, got {rows_per_batch}")

        self._rows_rendered = 0
        row = 0
        while row < self._height:
            row_end = min(row + rows_per_batch, self._height)
            render_rows(row, row_end, parallel=parallel)
            row = row_end
            self._rows_rendered = row
            yield (row, self._height)

    def get_framebuffer(self) -> npt.NDArray[np.float32]:
        """Get the unclamped float framebuffer of shape (height, width, 3)."""
        return get_framebuffer_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the image clamped to [0, 1] and quantized to 8 bits."""
        return framebuffer_to_uint8(self.get_framebuffer())

    def save_ppm(self, filepath: str) -> None:
        """Save the rendered image as a binary PPM (P6) file."""
        save_ppm(self.get_framebuffer(), filepath)

    def save_png(self, filepath: str) -> None:
        """Save the rendered image as a PNG file."""
        save_png(self.get_framebuffer(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"rows_rendered={self.rows_rendered})"
        )


def render_scene(
    scene: SceneConfig | SceneManager,
    camera: PinholeCamera,
    *,
    parallel: bool = True,
    rows_per_batch: int = DEFAULT_ROWS_PER_BATCH,
    callback: ProgressCallback | None = None,
) -> npt.NDArray[np.float32]:
    """Render a scene through a camera and return the float framebuffer.

    This is the single entry point from a scene description to pixel
    colors. Clamping and quantization are left to the caller.

    Args:
        scene: A SceneConfig to load, or a SceneManager (uploaded again first).
        camera: The camera supplying one primary ray per pixel.
        parallel: Render pixels in parallel (True) or on one thread.
        rows_per_batch: Number of rows rendered per kernel launch.
        callback: Optional progress callback (rows_rendered, total_rows).

    Returns:
        Unclamped float32 array of shape (camera.height, camera.width, 3).
    """
    from tinytracer.camera.pinhole import setup_camera
    from tinytracer.scene.manager import SceneConfig, SceneManager

    if isinstance(scene, SceneConfig):
        SceneManager().from_config(scene)
    else:
        scene.upload()

    setup_camera(camera)
    renderer = Renderer(camera.width, camera.height)
    renderer.render(rows_per_batch=rows_per_batch, parallel=parallel, callback=callback)
    return renderer.get_framebuffer()
