"""
Pen-advance layout of a single-line-per-row text.

The layout walks the text one character at a time. Explicit newlines
move the pen to the start of the next line; there is no wrapping.
"""

from ._engine import FIXED_SHIFT


class PenPosition:
    """An (x, y) pen position in integer pixels."""

    __slots__ = ["x", "y"]

    def __init__(self, x=0, y=0):
        self.x = int(x)
        self.y = int(y)

    def __repr__(self):
        return f"PenPosition({self.x}, {self.y})"

    def __eq__(self, other):
        if isinstance(other, PenPosition):
            return (self.x, self.y) == (other.x, other.y)
        elif isinstance(other, tuple):
            return (self.x, self.y) == other
        return NotImplemented

    def __iter__(self):
        yield self.x
        yield self.y

    def copy(self):
        return PenPosition(self.x, self.y)


class DrawInstruction:
    """Draw ``image`` with its top-left corner at (x, y)."""

    __slots__ = ["image", "x", "y", "char"]

    def __init__(self, image, x, y, char=None):
        self.image = image
        self.x = x
        self.y = y
        self.char = char

    def __repr__(self):
        return f"<DrawInstruction {self.char!r} at ({self.x}, {self.y})>"

    def execute(self, surface):
        surface.draw_image(self.image, self.x, self.y)


class LayoutEngine:
    """Turns a text into draw instructions, using the glyphs in a store.

    Parameters:
        engine (FontEngine): used to look up kerning between glyph pairs.
    """

    def __init__(self, engine):
        self._engine = engine

    def layout(self, text, origin, store, state, line_height):
        """Lay out the text starting with the pen at origin (on the baseline).

        This is a generator that yields a DrawInstruction for each glyph
        that has ink. The generator returns the final PenPosition.

        Kerning is applied between consecutive glyphs on the same line.
        A newline moves the pen to ``origin.x`` and down by ``line_height``.
        Characters that are not in the store produce no instruction,
        do not move the pen, and break the kerning chain.
        """
        x0, y0 = origin
        pen = PenPosition(x0, y0)
        prev = None
        line_height = int(line_height)

        for char in text:
            if char == "\n":
                pen.x = int(x0)
                pen.y += line_height
                prev = None
                continue

            entry = store.get(char)
            if entry is None:
                prev = None
                continue

            record, image = entry
            if prev is not None:
                dx, _ = self._engine.kerning(
                    prev.glyph_index, record.glyph_index, state
                )
                pen.x += int(dx) >> FIXED_SHIFT
            if image is not None:
                yield DrawInstruction(
                    image, pen.x + record.left, pen.y - record.top, char
                )
            pen.x += record.advance >> FIXED_SHIFT
            prev = record

        return pen

    def measure(self, text, origin, store, state, line_height):
        """Lay out the text without drawing, and return the final PenPosition."""
        gen = self.layout(text, origin, store, state, line_height)
        while True:
            try:
                next(gen)
            except StopIteration as stop:
                return stop.value
