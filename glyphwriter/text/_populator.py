"""
Filling the glyph store with the glyphs that a text needs.
"""

from ..utils import logger
from ._store import CacheEntry
from ._image import create_image


def missing_codepoints(text, store):
    """Get the code points in text that are not in the store, excluding newlines."""
    codepoints = {ord(c) for c in text}
    codepoints.discard(10)  # "\n"
    return codepoints - store.keys()


class CachePopulator:
    """Populates a GlyphStore using a FontEngine.

    Parameters:
        engine (FontEngine): the engine that rasterizes glyphs.
        store (GlyphStore): the store to populate.
        image_factory (coroutine function): turns a 2D pixel array into a
            drawable image. Defaults to black images.

    For each call, all missing characters are rasterized in a single batch,
    so the work is bounded by the number of distinct new characters,
    not by the length of the text.
    """

    def __init__(self, engine, store, image_factory=None):
        self._engine = engine
        self._store = store
        self._image_factory = image_factory or create_image

    @property
    def store(self):
        """The GlyphStore that this populator fills."""
        return self._store

    async def populate(self, text, state):
        """Rasterize and store the glyphs of text that are not yet in the store.

        Returns the number of entries added. Characters that the font does
        not map are not stored. If the store is cleared while this call
        is suspended, its results are stale and are discarded.
        """
        store = self._store
        codepoints = missing_codepoints(text, store)
        if not codepoints:
            return 0

        generation = store.generation
        glyphs = await self._engine.rasterize_batch(codepoints, state)
        if store.generation != generation:
            logger.debug(f"Discarding {len(glyphs)} glyphs from a superseded pass.")
            return 0

        count = 0
        for codepoint, record in glyphs.items():
            image = None
            if record.has_ink:
                image = await self._image_factory(record.pixels)
                if store.generation != generation:
                    logger.debug("Store cleared during image creation, discarding.")
                    return count
            store.set(codepoint, CacheEntry(record, image))
            count += 1

        unmapped = len(codepoints) - len(glyphs)
        if unmapped:
            logger.debug(f"{unmapped} characters not in the font's charmap.")
        return count
