"""
Drawable images, derived from the raw pixel data of a glyph.
"""

import asyncio

import numpy as np


class DrawableImage:
    """An RGBA image that can be drawn onto a surface.

    The colour channels hold the text colour and the alpha channel holds
    the glyph's coverage (or distance) values. Each image is owned by
    a single cache entry.
    """

    __slots__ = ["_data"]

    def __init__(self, data):
        data = np.asarray(data, np.uint8)
        if data.ndim != 3 or data.shape[2] != 4:
            raise ValueError("DrawableImage data must have shape (h, w, 4).")
        self._data = data

    def __repr__(self):
        return f"<DrawableImage {self.width}x{self.height} at 0x{hex(id(self))}>"

    @classmethod
    def from_coverage(cls, pixels, color=(0, 0, 0)):
        """Create an image from a 2D uint8 coverage array and an RGB colour."""
        pixels = np.asarray(pixels, np.uint8)
        data = np.empty(pixels.shape + (4,), np.uint8)
        data[..., :3] = color
        data[..., 3] = pixels
        return cls(data)

    @property
    def data(self):
        """The (h, w, 4) uint8 array."""
        return self._data

    @property
    def width(self):
        return self._data.shape[1]

    @property
    def height(self):
        return self._data.shape[0]


async def create_image(pixels, color=(0, 0, 0)):
    """Derive a DrawableImage from glyph pixels.

    This is a suspension point, like uploading an image to a surface
    would be.
    """
    await asyncio.sleep(0)
    return DrawableImage.from_coverage(pixels, color)
