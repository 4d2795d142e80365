"""Errors raised by the font engine and the render pass."""


class FontLoadError(RuntimeError):
    """Raised when font data cannot be parsed by the font engine.

    This is fatal for the render pass that needed the font: no glyphs
    are available for it.
    """


class FontNotFoundError(KeyError):
    """Raised when activating a font identity that was never loaded."""

    def __str__(self):
        # KeyError quotes its argument, which reads badly for a message
        return str(self.args[0]) if self.args else ""
