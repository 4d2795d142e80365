"""
The glyph store: a flat per-character cache of rasterized glyphs.

Entries are keyed by code point. The store is only valid for the
RenderState it was populated under; clearing it is the only way
entries go away.
"""

import numpy as np


def to_codepoint(char):
    """Convert a one-character string (or an int) to a code point."""
    if isinstance(char, int) and not isinstance(char, bool):
        if not 0 <= char <= 0x10FFFF:
            raise ValueError(f"Code point out of range: {char}")
        return char
    elif isinstance(char, str):
        if len(char) != 1:
            raise ValueError(f"Expected a single character, got {char!r}")
        return ord(char)
    else:
        cls = type(char).__name__
        raise TypeError(f"Glyph key must be str or int, not '{cls}'")


class GlyphRecord:
    """One rasterized glyph, for one (character, font, size, mode) combination.

    Parameters:
        glyph_index (int): the index of the glyph in the font.
        advance (int): the horizontal advance, in 26.6 fixed point.
        left (int): the horizontal offset from the pen to the ink box, in pixels.
        top (int): the distance from the baseline up to the top of the ink box.
        pixels (ndarray, None): the 2D uint8 coverage bitmap or distance field.
            None (or an empty array) for glyphs without ink.
    """

    __slots__ = ["_glyph_index", "_advance", "_left", "_top", "_pixels"]

    def __init__(self, glyph_index, advance, left=0, top=0, pixels=None):
        if pixels is not None:
            pixels = np.asarray(pixels, np.uint8)
            if pixels.ndim != 2:
                raise ValueError("Glyph pixels must be a 2D array.")
            pixels.flags.writeable = False
        self._glyph_index = int(glyph_index)
        self._advance = int(advance)
        self._left = int(left)
        self._top = int(top)
        self._pixels = pixels

    def __repr__(self):
        shape = "x".join(str(i) for i in self._pixels.shape) if self.has_ink else "-"
        return f"<GlyphRecord {self._glyph_index} ({shape}) at 0x{hex(id(self))}>"

    @property
    def glyph_index(self):
        """The engine-assigned index of this glyph in the font."""
        return self._glyph_index

    @property
    def advance(self):
        """The horizontal advance in 26.6 fixed point."""
        return self._advance

    @property
    def left(self):
        """The left bearing, in whole pixels."""
        return self._left

    @property
    def top(self):
        """The top bearing, in whole pixels (positive is up)."""
        return self._top

    @property
    def pixels(self):
        """The raw pixel data (read-only ndarray), or None."""
        return self._pixels

    @property
    def has_ink(self):
        """Whether this glyph has pixel data to draw."""
        return self._pixels is not None and self._pixels.size > 0


class CacheEntry:
    """A glyph record plus the drawable image derived from it (may be None)."""

    __slots__ = ["record", "image"]

    def __init__(self, record, image=None):
        self.record = record
        self.image = image

    def __repr__(self):
        return f"<CacheEntry {self.record!r} image={self.image is not None}>"

    def __iter__(self):
        # Allow ``record, image = entry``
        yield self.record
        yield self.image


class GlyphStore:
    """Maps characters to cache entries.

    The store is a plain data holder. Keys can be given as one-character
    strings or as integer code points; internally code points are used.
    Every call to ``clear()`` bumps the ``generation``, so that a
    population that started before the clear can tell that its results
    are stale.
    """

    def __init__(self):
        self._entries = {}  # codepoint -> CacheEntry
        self._generation = 0

    def __repr__(self):
        return f"<GlyphStore with {len(self)} entries at 0x{hex(id(self))}>"

    def __len__(self):
        return len(self._entries)

    def __contains__(self, char):
        return self.has(char)

    @property
    def generation(self):
        """An integer that increases each time the store is cleared."""
        return self._generation

    def keys(self):
        """A set of the code points currently in the store."""
        return set(self._entries)

    def has(self, char):
        return to_codepoint(char) in self._entries

    def get(self, char):
        """Get the CacheEntry for the given character, or None."""
        return self._entries.get(to_codepoint(char), None)

    def set(self, char, entry):
        if not isinstance(entry, CacheEntry):
            cls = type(entry).__name__
            raise TypeError(f"GlyphStore.set() expects a CacheEntry, not '{cls}'")
        self._entries[to_codepoint(char)] = entry

    def clear(self):
        """Remove all entries. This is the only way entries are removed."""
        self._entries.clear()
        self._generation += 1
