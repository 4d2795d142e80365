"""
The render state and the policy that invalidates the glyph store.
"""

from ..utils import logger


class RenderMode:
    """The rasterization modes: a coverage bitmap or a signed distance field."""

    bitmap = "bitmap"
    sdf = "sdf"

    @classmethod
    def values(cls):
        return (cls.bitmap, cls.sdf)


class RenderState:
    """The (font, size, mode) triple that a glyph store is valid for.

    Parameters:
        font (hashable): the identity of the font, e.g. ``("Noto Sans", "Regular")``.
        size (int): the pixel size.
        mode (str): either "bitmap" or "sdf".

    Render states are immutable and compare equal when all three fields
    are equal.
    """

    __slots__ = ["_font", "_size", "_mode"]

    def __init__(self, font, size, mode=RenderMode.bitmap):
        try:
            hash(font)
        except TypeError:
            cls = type(font).__name__
            raise TypeError(f"Font identity must be hashable, not '{cls}'") from None
        if isinstance(size, bool) or not isinstance(size, int):
            cls = type(size).__name__
            raise TypeError(f"Pixel size must be an int, not '{cls}'")
        if size <= 0:
            raise ValueError(f"Pixel size must be positive, not {size}")
        if isinstance(mode, bool):
            mode = RenderMode.sdf if mode else RenderMode.bitmap
        if mode not in RenderMode.values():
            raise ValueError(f"Render mode must be 'bitmap' or 'sdf', not {mode!r}")
        self._font = font
        self._size = size
        self._mode = mode

    def __repr__(self):
        return f"<RenderState {self._font!r} {self._size}px {self._mode}>"

    def __eq__(self, other):
        if not isinstance(other, RenderState):
            return NotImplemented
        return (
            self._font == other._font
            and self._size == other._size
            and self._mode == other._mode
        )

    def __hash__(self):
        return hash((self._font, self._size, self._mode))

    def copy(self, **kwargs):
        """Make a copy of the render state, with given kwargs replaced."""
        d = {"font": self._font, "size": self._size, "mode": self._mode}
        for k, v in kwargs.items():
            if v is not None:
                d[k] = v
        return self.__class__(**d)

    @property
    def font(self):
        """The font identity."""
        return self._font

    @property
    def size(self):
        """The pixel size."""
        return self._size

    @property
    def mode(self):
        """The render mode, "bitmap" or "sdf"."""
        return self._mode

    @property
    def sdf(self):
        """Whether glyphs are rendered as signed distance fields."""
        return self._mode == RenderMode.sdf


class InvalidationPolicy:
    """Keeps a glyph store consistent with the active render state.

    Any change in font, size or mode clears the whole store. There is
    no partial invalidation.
    """

    def __init__(self, store):
        self._store = store
        self._state = None

    @property
    def state(self):
        """The last applied RenderState (None before the first pass)."""
        return self._state

    def apply(self, state):
        """Apply the given state. Returns True if the store was cleared."""
        if not isinstance(state, RenderState):
            cls = type(state).__name__
            raise TypeError(f"Expected a RenderState, not '{cls}'")
        if state == self._state:
            return False
        # Entries of unknown provenance are dropped too
        cleared = self._state is not None or len(self._store) > 0
        if cleared:
            logger.debug(f"Render state changed to {state!r}, clearing glyph store")
            self._store.clear()
        self._state = state
        return cleared
