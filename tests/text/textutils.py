"""Helpers for the text tests: a predictable font engine, and finding a real font."""

import os
import asyncio

import numpy as np

from glyphwriter.text import FontEngine, GlyphRecord, FontNotFoundError, SizeMetrics


# char -> (advance_px, left, top, width, height)
DEFAULT_GLYPHS = {
    "a": (10, 1, 7, 7, 7),
    "b": (10, 1, 10, 7, 10),
    "c": (9, 1, 7, 6, 7),
    "A": (12, 0, 10, 12, 10),
    "V": (12, 0, 10, 12, 10),
    "i": (4, 1, 10, 2, 10),
    " ": (5, 0, 0, 0, 0),
}

# (char, char) -> kerning in px
DEFAULT_KERNING = {
    ("a", "b"): -1,
    ("A", "V"): -2,
    (" ", "A"): -1,
}


class FakeEngine(FontEngine):
    """A font engine with made-up glyphs, that records the requests made to it.

    The glyph index of a character is its code point. Glyphs look the same
    in every mode and size; only the font identity must be known.
    """

    def __init__(self, glyphs=None, kerning=None, line_height=20, fonts=("FontA",)):
        self.glyphs = DEFAULT_GLYPHS if glyphs is None else glyphs
        self.kerning_px = DEFAULT_KERNING if kerning is None else kerning
        self.line_height = line_height
        self.fonts = set(fonts)
        self.requests = []  # list of (codepoints, state)
        self.kerning_calls = []
        self.active_font = None
        self.gate = None  # set to an asyncio.Event to hold rasterization

    async def rasterize_batch(self, codepoints, state):
        self.requests.append((set(codepoints), state))
        await asyncio.sleep(0)
        if self.gate is not None:
            await self.gate.wait()
        result = {}
        for codepoint in codepoints:
            char = chr(codepoint)
            if char not in self.glyphs:
                continue
            advance, left, top, w, h = self.glyphs[char]
            pixels = np.full((h, w), 255, np.uint8) if w and h else None
            result[codepoint] = GlyphRecord(codepoint, advance << 6, left, top, pixels)
        return result

    def kerning(self, prev_index, cur_index, state):
        self.kerning_calls.append((chr(prev_index), chr(cur_index)))
        dx = self.kerning_px.get((chr(prev_index), chr(cur_index)), 0)
        return dx << 6, 0

    def set_active_font(self, identity):
        if identity not in self.fonts:
            raise FontNotFoundError(f"Font {identity!r} is not loaded.")
        self.active_font = identity
        return identity

    def set_pixel_size(self, size):
        return SizeMetrics(
            (self.line_height - 4) << 6, -4 << 6, self.line_height << 6, 12 << 6
        )

    @property
    def requested_chars(self):
        """The set of chars requested over all batches."""
        chars = set()
        for codepoints, _ in self.requests:
            chars.update(chr(c) for c in codepoints)
        return chars


PREFERRED_FONTS = [
    "DejaVuSans.ttf",
    "LiberationSans-Regular.ttf",
    "NotoSans-Regular.ttf",
]

FONT_DIRS = [
    "/usr/share/fonts",
    "/usr/local/share/fonts",
    os.path.expanduser("~/.fonts"),
    os.path.expanduser("~/.local/share/fonts"),
    "/Library/Fonts",
    "/System/Library/Fonts",
    os.path.join(os.getenv("WINDIR", "C:/Windows"), "Fonts"),
]


def find_font_file():
    """Find a TrueType font on this machine, or return None."""
    candidates = []
    for font_dir in FONT_DIRS:
        if not os.path.isdir(font_dir):
            continue
        for root, _, filenames in os.walk(font_dir):
            for fname in filenames:
                if fname.lower().endswith(".ttf"):
                    candidates.append(os.path.join(root, fname))
    for preferred in PREFERRED_FONTS:
        for filename in candidates:
            if os.path.basename(filename) == preferred:
                return filename
    return sorted(candidates)[0] if candidates else None
