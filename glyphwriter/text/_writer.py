"""
The TextWriter runs render passes: it ties the store, the invalidation
policy, the populator and the layout engine together.
"""

import time

from ..utils import logger
from ._store import GlyphStore
from ._state import RenderMode, RenderState, InvalidationPolicy
from ._populator import CachePopulator
from ._layout import LayoutEngine, PenPosition


class RenderResult:
    """The outcome of a render pass: draw instructions and the final pen."""

    def __init__(self, state, instructions, pen, line_height):
        self.state = state
        self.instructions = instructions
        self.pen = pen
        self.line_height = line_height

    def __repr__(self):
        n = len(self.instructions)
        return f"<RenderResult {n} instructions, pen at ({self.pen.x}, {self.pen.y})>"

    def __iter__(self):
        return iter(self.instructions)

    def __len__(self):
        return len(self.instructions)

    def execute(self, surface):
        """Draw all instructions onto the surface."""
        for instruction in self.instructions:
            instruction.execute(surface)


class TextWriter:
    """Writes text onto a surface, caching glyphs between passes.

    Parameters:
        engine (FontEngine): the font engine to use.
        surface (ArraySurface, optional): the draw target for ``write()``.
            If it has a ``create_image()`` method, that is used to derive
            glyph images.
        font (hashable): the font identity, e.g. ``("Noto Sans", "Regular")``.
        size (int): the pixel size.
        sdf (bool): whether to render signed distance fields instead of bitmaps.

    The glyph store lives as long as the writer. It is cleared whenever
    font, size or sdf differ from the previous pass.

    Render passes are numbered. When a pass is still waiting for its
    glyphs while a newer pass starts, the older pass is abandoned: its
    ``render()`` returns None and its ``write()`` draws nothing.
    """

    def __init__(self, engine, surface=None, *, font, size, sdf=False):
        self._engine = engine
        self._surface = surface
        self._store = GlyphStore()
        self._policy = InvalidationPolicy(self._store)
        image_factory = getattr(surface, "create_image", None)
        self._populator = CachePopulator(engine, self._store, image_factory)
        self._layout = LayoutEngine(engine)
        self._pass_count = 0
        # This validates the args
        mode = RenderMode.sdf if sdf else RenderMode.bitmap
        self._state = RenderState(font, size, mode)

    def __repr__(self):
        return f"<TextWriter {self._state!r} at 0x{hex(id(self))}>"

    @property
    def engine(self):
        """The font engine."""
        return self._engine

    @property
    def surface(self):
        """The surface that ``write()`` draws to (may be None)."""
        return self._surface

    @property
    def store(self):
        """The GlyphStore holding the cached glyphs."""
        return self._store

    @property
    def state(self):
        """The RenderState for the next pass."""
        return self._state

    @property
    def font(self):
        """The font identity to render with."""
        return self._state.font

    @font.setter
    def font(self, font):
        self._state = self._state.copy(font=font)

    @property
    def size(self):
        """The pixel size to render at."""
        return self._state.size

    @size.setter
    def size(self, size):
        self._state = self._state.copy(size=size)

    @property
    def sdf(self):
        """Whether glyphs are rendered as signed distance fields."""
        return self._state.sdf

    @sdf.setter
    def sdf(self, sdf):
        mode = RenderMode.sdf if sdf else RenderMode.bitmap
        self._state = self._state.copy(mode=mode)

    async def render(self, text, x=0, y=None):
        """Lay out the text with the pen starting at (x, y), on the baseline.

        When y is None, the first baseline is placed one line height from
        the top. Returns a RenderResult, or None if a newer pass started
        before this one got its glyphs. Errors from the font engine (e.g.
        a font that is not loaded) propagate.
        """
        if not isinstance(text, str):
            cls = type(text).__name__
            raise TypeError(f"Text must be str, not '{cls}'")

        self._pass_count += 1
        this_pass = self._pass_count
        t0 = time.perf_counter()

        state = self._state
        line_height = self._engine.metrics(state).line_height
        self._policy.apply(state)
        await self._populator.populate(text, state)

        if this_pass != self._pass_count:
            logger.debug(f"Render pass {this_pass} was superseded, ignoring.")
            return None

        origin = PenPosition(x, line_height if y is None else y)
        instructions = []
        gen = self._layout.layout(text, origin, self._store, state, line_height)
        while True:
            try:
                instructions.append(next(gen))
            except StopIteration as stop:
                pen = stop.value
                break

        dt = time.perf_counter() - t0
        logger.debug(
            f"Render pass {this_pass}: {len(text)} chars in {1000 * dt:0.2f} ms"
        )
        return RenderResult(state, instructions, pen, line_height)

    async def write(self, text, x=0, y=None):
        """Render the text and draw it onto the surface.

        Returns the final PenPosition, or None if the pass was superseded.
        """
        if self._surface is None:
            raise RuntimeError("TextWriter.write() needs a surface.")
        result = await self.render(text, x, y)
        if result is None:
            return None
        result.execute(self._surface)
        return result.pen

    async def measure(self, text, x=0, y=0):
        """Get the final pen position for the text, without drawing.

        Returns None if the pass was superseded.
        """
        result = await self.render(text, x, y)
        return None if result is None else result.pen
