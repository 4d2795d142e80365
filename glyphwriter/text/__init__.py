"""
The four parts of writing text (also see the README):

* Invalidation: the glyph store is valid for one (font, size, mode) state.
* Population: missing glyphs are rasterized in one batch per pass.
* Layout: the pen advances over the text, applying kerning.
* Drawing: the resulting instructions are executed against a surface.

The TextWriter combines these into render passes.
"""

from ._errors import FontLoadError, FontNotFoundError  # noqa: F401
from ._store import GlyphRecord, CacheEntry, GlyphStore  # noqa: F401
from ._image import DrawableImage, create_image  # noqa: F401
from ._state import RenderMode, RenderState, InvalidationPolicy  # noqa: F401
from ._engine import FontEngine, FreeTypeEngine, FontFace, SizeMetrics  # noqa: F401
from ._populator import CachePopulator  # noqa: F401
from ._layout import LayoutEngine, DrawInstruction, PenPosition  # noqa: F401
from ._surface import ArraySurface  # noqa: F401
from ._writer import TextWriter, RenderResult  # noqa: F401
