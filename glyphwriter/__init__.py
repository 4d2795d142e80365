"""Glyph caching and pen-advance text layout on top of FreeType."""

# ruff: noqa: F401

from ._version import __version__, version_info
from . import utils

from .utils import logger
from .text import (
    FontLoadError,
    FontNotFoundError,
    GlyphRecord,
    CacheEntry,
    GlyphStore,
    DrawableImage,
    RenderMode,
    RenderState,
    InvalidationPolicy,
    FontEngine,
    FreeTypeEngine,
    CachePopulator,
    LayoutEngine,
    DrawInstruction,
    PenPosition,
    ArraySurface,
    TextWriter,
)
