import logging

from glyphwriter.utils import logger, _set_log_level


def test_log_level(monkeypatch):
    monkeypatch.delenv("GLYPHWRITER_LOG_LEVEL", raising=False)
    _set_log_level()
    assert logger.level == logging.WARN

    monkeypatch.setenv("GLYPHWRITER_LOG_LEVEL", "debug")
    _set_log_level()
    assert logger.level == logging.DEBUG

    monkeypatch.setenv("GLYPHWRITER_LOG_LEVEL", "20")
    _set_log_level()
    assert logger.level == logging.INFO

    monkeypatch.delenv("GLYPHWRITER_LOG_LEVEL")
    _set_log_level()
    assert logger.level == logging.WARN


def test_invalid_log_level(monkeypatch, caplog):
    monkeypatch.setenv("GLYPHWRITER_LOG_LEVEL", "notalevel")
    with caplog.at_level(logging.WARN, logger="glyphwriter"):
        _set_log_level()
    assert "Invalid glyphwriter log level" in caplog.text
    monkeypatch.delenv("GLYPHWRITER_LOG_LEVEL")
    _set_log_level()


def test_debug_messages(caplog):
    import asyncio
    from glyphwriter.text import TextWriter

    from textutils import FakeEngine

    writer = TextWriter(FakeEngine(), font="FontA", size=16)
    with caplog.at_level(logging.DEBUG, logger="glyphwriter"):
        asyncio.run(writer.render("ab"))
        writer.size = 20
        asyncio.run(writer.render("ab"))
    assert "clearing glyph store" in caplog.text
    assert "Render pass 2" in caplog.text
