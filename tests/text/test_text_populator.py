import asyncio

from glyphwriter.text import (
    CachePopulator,
    GlyphStore,
    RenderState,
    DrawableImage,
)
from glyphwriter.text._populator import missing_codepoints

from textutils import FakeEngine


STATE = RenderState("FontA", 16)


def populate(populator, text, state=STATE):
    return asyncio.run(populator.populate(text, state))


def test_missing_codepoints():
    store = GlyphStore()
    assert missing_codepoints("aab\nb", store) == {ord("a"), ord("b")}
    assert missing_codepoints("\n\n", store) == set()
    assert missing_codepoints("", store) == set()


def test_populate_distinct_chars():
    engine = FakeEngine()
    store = GlyphStore()
    populator = CachePopulator(engine, store)

    count = populate(populator, "abba\nab")
    assert count == 2

    # One batch, with each distinct char once, and no newline
    assert len(engine.requests) == 1
    codepoints, state = engine.requests[0]
    assert codepoints == {ord("a"), ord("b")}
    assert state == STATE
    assert store.keys() == {ord("a"), ord("b")}


def test_populate_warm_cache():
    engine = FakeEngine()
    store = GlyphStore()
    populator = CachePopulator(engine, store)

    populate(populator, "ab")
    assert len(engine.requests) == 1

    # Everything is in the store: no request
    assert populate(populator, "baab\nba") == 0
    assert len(engine.requests) == 1

    # Only newlines: no request
    assert populate(populator, "\n") == 0
    assert len(engine.requests) == 1


def test_populate_only_missing_chars():
    engine = FakeEngine()
    store = GlyphStore()
    populator = CachePopulator(engine, store)

    populate(populator, "ab")
    populate(populator, "abcA")

    assert len(engine.requests) == 2
    codepoints, _ = engine.requests[1]
    assert codepoints == {ord("c"), ord("A")}
    assert len(store) == 4


def test_populate_images():
    engine = FakeEngine()
    store = GlyphStore()
    populator = CachePopulator(engine, store)

    populate(populator, "a ")

    record, image = store.get("a")
    assert isinstance(image, DrawableImage)
    assert (image.height, image.width) == record.pixels.shape
    assert image.data[..., 3].max() == 255

    # Whitespace gets an entry, without image
    record, image = store.get(" ")
    assert record is not None
    assert record.advance == 5 << 6
    assert image is None


def test_populate_custom_image_factory():
    created = []

    async def image_factory(pixels):
        created.append(pixels.shape)
        return DrawableImage.from_coverage(pixels, (255, 0, 0))

    engine = FakeEngine()
    store = GlyphStore()
    populator = CachePopulator(engine, store, image_factory)

    populate(populator, "ab ")
    assert sorted(created) == [(7, 7), (10, 7)]
    assert tuple(store.get("a").image.data[0, 0]) == (255, 0, 0, 255)


def test_populate_unmapped():
    engine = FakeEngine()
    store = GlyphStore()
    populator = CachePopulator(engine, store)

    assert populate(populator, "a☃b") == 2
    assert engine.requested_chars == {"a", "☃", "b"}
    assert not store.has("☃")

    # Unmapped chars are requested again in a later pass; they are not cached
    populate(populator, "☃")
    assert len(engine.requests) == 2


def test_populate_discards_stale_results():
    engine = FakeEngine()
    store = GlyphStore()
    populator = CachePopulator(engine, store)

    async def main():
        engine.gate = asyncio.Event()
        task = asyncio.ensure_future(populator.populate("abc", STATE))
        await asyncio.sleep(0.01)
        assert len(engine.requests) == 1
        # The store is cleared while the batch is in flight
        store.clear()
        engine.gate.set()
        return await task

    assert asyncio.run(main()) == 0
    assert len(store) == 0


def test_populate_discards_when_cleared_during_image_creation():
    store = GlyphStore()

    async def image_factory(pixels):
        store.clear()
        return DrawableImage.from_coverage(pixels)

    engine = FakeEngine()
    populator = CachePopulator(engine, store, image_factory)

    # The clear during image creation stops the population
    assert populate(populator, "a") == 0
    assert len(store) == 0


if __name__ == "__main__":
    for ob in list(globals().values()):
        if callable(ob) and ob.__name__.startswith("test_"):
            print(f"{ob.__name__} ...")
            ob()
    print("done")
