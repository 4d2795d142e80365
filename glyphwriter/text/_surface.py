"""
A numpy-backed draw target.
"""

import numpy as np

from ._image import DrawableImage, create_image


class ArraySurface:
    """An RGBA raster surface that glyph images can be drawn onto.

    Parameters:
        width (int): the width in pixels.
        height (int): the height in pixels.
        color (tuple): the RGB text colour used for images created by this surface.

    Images are composited with "source over" blending, and clipped at
    the surface edges.
    """

    def __init__(self, width, height, *, color=(0, 0, 0)):
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise ValueError("Surface width and height must be positive.")
        self._array = np.zeros((height, width, 4), np.uint8)
        self._color = tuple(int(c) for c in color)
        if len(self._color) != 3:
            raise ValueError("Surface color must be an RGB tuple.")

    def __repr__(self):
        return f"<ArraySurface {self.width}x{self.height} at 0x{hex(id(self))}>"

    @property
    def array(self):
        """The (h, w, 4) uint8 array holding the pixels."""
        return self._array

    @property
    def width(self):
        return self._array.shape[1]

    @property
    def height(self):
        return self._array.shape[0]

    @property
    def color(self):
        """The RGB colour that new glyph images get."""
        return self._color

    async def create_image(self, pixels):
        """Derive a drawable image from glyph pixels, in this surface's colour."""
        return await create_image(pixels, self._color)

    def clear(self):
        """Reset all pixels to transparent."""
        self._array.fill(0)

    def draw_image(self, image, x, y):
        """Draw the image with its top-left corner at integer (x, y)."""
        if not isinstance(image, DrawableImage):
            cls = type(image).__name__
            raise TypeError(f"draw_image() expects a DrawableImage, not '{cls}'")
        x, y = int(x), int(y)
        src = image.data

        # Clip to the surface
        x1, y1 = max(x, 0), max(y, 0)
        x2 = min(x + src.shape[1], self.width)
        y2 = min(y + src.shape[0], self.height)
        if x2 <= x1 or y2 <= y1:
            return
        src = src[y1 - y : y2 - y, x1 - x : x2 - x].astype(np.float32) / 255
        dst = self._array[y1:y2, x1:x2].astype(np.float32) / 255

        # Source over
        src_a = src[..., 3:4]
        dst_a = dst[..., 3:4]
        out_a = src_a + dst_a * (1 - src_a)
        with np.errstate(divide="ignore", invalid="ignore"):
            out_rgb = src[..., :3] * src_a + dst[..., :3] * dst_a * (1 - src_a)
            out_rgb = out_rgb / out_a
        out_rgb = np.where(out_a > 0, out_rgb, 0)

        out = np.concatenate([out_rgb, out_a], axis=-1)
        self._array[y1:y2, x1:x2] = np.round(out * 255).astype(np.uint8)
