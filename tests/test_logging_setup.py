from __future__ import annotations

import io
import logging

import pytest

from ledger_ingest.logging_setup import configure_logging, get_logger, resolve_level


@pytest.mark.parametrize(
    ("level", "expected"),
    [("debug", logging.DEBUG), (" warning ", logging.WARNING), ("15", 15), ("bogus", logging.INFO)],
)
def test_resolve_level(level, expected):
    assert resolve_level(level) == expected


def test_level_and_format_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("LEDGER_LOG_LEVEL", "error")
    monkeypatch.setenv("LEDGER_LOG_FORMAT", "%(levelname)s|%(message)s")
    stream = io.StringIO()

    configure_logging(stream=stream)
    log = get_logger("ledger_ingest.test")
    log.warning("hidden")
    log.error("shown %d", 1)

    assert stream.getvalue() == "ERROR|shown 1\n"


def test_configure_is_idempotent():
    first, second = io.StringIO(), io.StringIO()

    logger = configure_logging("INFO", fmt="%(message)s", stream=first)
    configure_logging("DEBUG", stream=second)
    get_logger("ledger_ingest.ledger").info("once")

    assert len(logger.handlers) == 1
    assert first.getvalue() == "once\n"
    assert second.getvalue() == ""
