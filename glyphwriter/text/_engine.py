"""
The font engine: loading faces, rasterizing glyphs and reporting kerning.

The core of glyphwriter only talks to the ``FontEngine`` interface. The
``FreeTypeEngine`` implements it with freetype-py.

Relevant links:
* https://freetype.org/freetype2/docs/glyphs/glyphs-3.html
* https://freetype.org/freetype2/docs/reference/ft2-base_interface.html
"""

import io
import os
import ctypes
import asyncio
import threading

import numpy as np
import freetype
import freetype.raw

from ..utils import logger
from ._errors import FontLoadError, FontNotFoundError
from ._state import RenderState
from ._store import GlyphRecord


# FreeType reports most distances in 26.6 fixed point
FIXED_SHIFT = 6


class SizeMetrics:
    """The metrics of a font at a specific size, in 26.6 fixed point."""

    __slots__ = ["ascender", "descender", "height", "max_advance"]

    def __init__(self, ascender, descender, height, max_advance=0):
        self.ascender = int(ascender)
        self.descender = int(descender)
        self.height = int(height)
        self.max_advance = int(max_advance)

    def __repr__(self):
        return f"<SizeMetrics line_height={self.line_height}px at 0x{hex(id(self))}>"

    @property
    def line_height(self):
        """The baseline-to-baseline distance, in whole pixels."""
        return self.height >> FIXED_SHIFT


class FontEngine:
    """Base class for font engines.

    A font engine owns the fonts, and turns code points into glyph records
    for a given RenderState. Subclasses must implement all methods.
    """

    async def rasterize_batch(self, codepoints, state):
        """Rasterize the given code points under the given RenderState.

        Returns a dict codepoint -> GlyphRecord. Code points that the
        font does not map are absent from the result.
        """
        raise NotImplementedError()

    def kerning(self, prev_index, cur_index, state):
        """Get the kerning (dx, dy) in 26.6 fixed point between two glyph indices."""
        raise NotImplementedError()

    def set_active_font(self, identity):
        """Make the font with the given identity the active one. Returns a handle."""
        raise NotImplementedError()

    def set_pixel_size(self, size):
        """Set the pixel size of the active font. Returns SizeMetrics."""
        raise NotImplementedError()

    def metrics(self, state):
        """Activate the font and size of the given state and return its SizeMetrics."""
        self.set_active_font(state.font)
        return self.set_pixel_size(state.size)


class FontFace:
    """A loaded face, registered in a FreeTypeEngine under (family, style)."""

    def __init__(self, face, filename=None):
        self._face = face
        self._filename = filename
        self._family = (face.family_name or b"").decode(errors="replace")
        self._style = (face.style_name or b"").decode(errors="replace")
        if not self._family and filename:
            name = os.path.basename(filename).split(".")[0]
            family, _, style = name.partition("-")
            self._family = family
            self._style = self._style or style
        self._family = self._family or "Unknown"
        self._style = self._style or "Regular"

    def __repr__(self):
        return f"<FontFace {self._family} {self._style} at 0x{hex(id(self))}>"

    @property
    def face(self):
        """The freetype.Face object."""
        return self._face

    @property
    def filename(self):
        """The file this face was loaded from, or None if loaded from memory."""
        return self._filename

    @property
    def family(self):
        """The family name, e.g. 'Noto Sans'."""
        return self._family

    @property
    def style(self):
        """The style name, e.g. 'Regular' or 'Bold Italic'."""
        return self._style

    @property
    def identity(self):
        """The (family, style) tuple that identifies this face."""
        return self._family, self._style


class FreeTypeEngine(FontEngine):
    """A font engine based on FreeType (thread-safe).

    Fonts are loaded from bytes or files, and each face in a font is
    registered under its (family, style) identity. The blocking FreeType
    work of ``rasterize_batch()`` runs in a worker thread; face access is
    serialized with a lock.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._faces = {}  # family -> style -> FontFace
        self._active = None  # FontFace
        self._active_size = None
        self._metrics = None

    # %% Font management

    def load_font_bytes(self, data, filename=None):
        """Load all faces from the given font data (a font file or collection).

        Returns a list of the FontFace objects that were registered. Faces
        whose family and style are already registered are skipped.
        Raises FontLoadError when the data cannot be parsed.
        """
        data = bytes(data)
        face = self._new_face(data, 0, filename)
        num_faces = max(face.num_faces, 1)

        new_faces = []
        with self._lock:
            for i in range(num_faces):
                if i > 0:
                    face = self._new_face(data, i, filename)
                ff = FontFace(face, filename)
                styles = self._faces.setdefault(ff.family, {})
                if ff.style in styles:
                    logger.warning(
                        f"Font '{ff.family}' with style '{ff.style}' already loaded."
                    )
                    continue
                styles[ff.style] = ff
                new_faces.append(ff)
                logger.info(f"Font '{ff.family}' with style '{ff.style}' loaded.")
        return new_faces

    def load_font_file(self, filename):
        """Load all faces from the given font file. See ``load_font_bytes()``."""
        filename = os.fspath(filename)
        try:
            with open(filename, "rb") as f:
                data = f.read()
        except OSError as err:
            raise FontLoadError(f"Cannot read font file {filename!r}: {err}") from err
        return self.load_font_bytes(data, filename)

    def _new_face(self, data, index, filename):
        try:
            return freetype.Face(io.BytesIO(data), index)
        except freetype.FT_Exception as err:
            what = repr(filename) if filename else "from bytes"
            raise FontLoadError(f"FreeType cannot load font {what}: {err}") from err

    def unload_font(self, family):
        """Unload all faces of the given family."""
        with self._lock:
            faces = self._faces.pop(family, {})
            if self._active is not None and self._active.family == family:
                self._active = None
                self._active_size = None
                self._metrics = None
            if faces:
                logger.info(f"Font '{family}' unloaded.")

    def fonts(self):
        """Get a list of (family, style) tuples of the loaded faces."""
        with self._lock:
            return [
                (family, style)
                for family, styles in self._faces.items()
                for style in styles
            ]

    def get_face(self, identity):
        """Get the FontFace for the given identity.

        The identity is a (family, style) tuple, or just a family name,
        in which case the "Regular" style (or else the first loaded style)
        is selected.
        """
        if isinstance(identity, str):
            family, style = identity, None
        else:
            family, style = identity
        with self._lock:
            styles = self._faces.get(family, None)
            if styles:
                if style is None:
                    return styles.get("Regular", None) or next(iter(styles.values()))
                elif style in styles:
                    return styles[style]
        raise FontNotFoundError(f"Font {identity!r} is not loaded.")

    # %% Active font and size

    @property
    def active_face(self):
        """The currently active FontFace, or None."""
        return self._active

    def set_active_font(self, identity):
        """Activate the given font and select its Unicode charmap.

        Returns the FontFace.
        """
        ff = self.get_face(identity)
        with self._lock:
            if ff is not self._active:
                self._active = ff
                self._active_size = None
                self._metrics = None
                try:
                    ff.face.select_charmap(freetype.FT_ENCODING_UNICODE)
                except freetype.FT_Exception:
                    logger.warning(f"Unicode charmap not found for {ff!r}")
            return ff

    def set_pixel_size(self, size):
        """Set the pixel size of the active font and return its SizeMetrics."""
        with self._lock:
            face = self._require_face().face
            if size != self._active_size:
                try:
                    face.set_pixel_sizes(0, int(size))
                except freetype.FT_Exception as err:
                    raise RuntimeError(f"Cannot set pixel size {size}: {err}") from err
                self._active_size = size
                self._metrics = self._read_metrics(face)
            return self._metrics

    def set_char_size(self, width=0, height=0, hres=72, vres=72):
        """Set the size of the active font in points (26.6). Returns SizeMetrics.

        This invalidates the pixel size, so the next ``metrics()`` or
        ``rasterize_batch()`` call sets it again.
        """
        with self._lock:
            face = self._require_face().face
            try:
                face.set_char_size(width, height, hres, vres)
            except freetype.FT_Exception as err:
                raise RuntimeError(f"Cannot set char size: {err}") from err
            self._active_size = None
            self._metrics = self._read_metrics(face)
            return self._metrics

    def _require_face(self):
        if self._active is None:
            raise RuntimeError("No active font; call set_active_font() first.")
        return self._active

    def _read_metrics(self, face):
        m = face.size
        return SizeMetrics(m.ascender, m.descender, m.height, m.max_advance)

    def metrics(self, state):
        with self._lock:
            return super().metrics(state)

    # %% Glyphs

    async def rasterize_batch(self, codepoints, state):
        """Rasterize the given code points in a worker thread."""
        if not isinstance(state, RenderState):
            raise TypeError("rasterize_batch() needs a RenderState.")
        codepoints = sorted(set(codepoints))
        return await asyncio.to_thread(self._rasterize_batch, codepoints, state)

    def _rasterize_batch(self, codepoints, state):
        glyphs = {}
        with self._lock:
            self.metrics(state)
            face = self._active.face
            for codepoint in codepoints:
                glyph_index = face.get_char_index(codepoint)
                if not glyph_index:
                    continue  # not in charmap
                try:
                    glyphs[codepoint] = self._rasterize_glyph(
                        face, glyph_index, state.sdf
                    )
                except freetype.FT_Exception as err:
                    logger.debug(f"Can't load char {codepoint}: {err}")
        return glyphs

    def _rasterize_glyph(self, face, glyph_index, sdf):
        if not sdf:
            face.load_glyph(glyph_index, freetype.FT_LOAD_RENDER)
        else:
            # FreeType can render an SDF from the outline, or from a bitmap
            # when the glyph has been rendered as a bitmap first. The latter
            # is faster and has fewer artifacts with sharp or intersecting curves.
            face.load_glyph(glyph_index, freetype.FT_LOAD_DEFAULT)
            face.glyph.render(freetype.FT_RENDER_MODE_NORMAL)
            try:
                face.glyph.render(freetype.FT_RENDER_MODE_SDF)
            except freetype.FT_Exception:
                pass  # FreeType refuses SDF for glyphs without ink, e.g. spaces

        slot = face.glyph
        bitmap = slot.bitmap
        pixels = None
        if bitmap.rows and bitmap.width:
            # Rows can be padded, so the pitch can exceed the width
            pitch = abs(bitmap.pitch)
            pixels = np.array(bitmap.buffer, np.uint8).reshape(bitmap.rows, pitch)
            pixels = pixels[:, : bitmap.width].copy()
            if bitmap.pitch < 0:
                pixels = pixels[::-1].copy()  # bottom-up flow

        return GlyphRecord(
            glyph_index, slot.advance.x, slot.bitmap_left, slot.bitmap_top, pixels
        )

    def kerning(self, prev_index, cur_index, state):
        """Get the kerning between two glyph indices, in 26.6 fixed point.

        Only the legacy 'kern' table is consulted. Faces without it give (0, 0).
        """
        with self._lock:
            self.metrics(state)
            face = self._active.face
            if not face.has_kerning:
                return 0, 0
            vector = freetype.FT_Vector(0, 0)
            error = freetype.raw.FT_Get_Kerning(
                face._FT_Face,
                int(prev_index),
                int(cur_index),
                freetype.FT_KERNING_DEFAULT,
                ctypes.byref(vector),
            )
            if error:
                logger.debug("Unable to read kerning.")
                return 0, 0
            return vector.x, vector.y

    def iter_chars(self, state):
        """Get an iterator of (codepoint, glyph_index) for every char the font maps."""
        # Collect under the lock, so we don't hold it while the caller iterates
        chars = []
        with self._lock:
            self.metrics(state)
            face = self._active.face
            charcode, glyph_index = face.get_first_char()
            while glyph_index:
                chars.append((charcode, glyph_index))
                charcode, glyph_index = face.get_next_char(charcode, glyph_index)
        return iter(chars)
