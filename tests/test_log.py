"""Tests for taskdeps.log: Rich-backed logger levels."""

from __future__ import annotations

import io

from rich.console import Console

from taskdeps import log


def _logger(**kwargs):
    out, err = io.StringIO(), io.StringIO()
    logger = log.Logger(
        console=Console(file=out, width=200, highlight=False),
        err_console=Console(file=err, width=200, highlight=False),
        **kwargs,
    )
    return logger, out, err


def test_levels():
    logger, out, err = _logger()
    logger.info("hello")
    logger.success("done")
    logger.warn("careful")
    logger.debug("hidden")
    logger.error("bad")
    text = out.getvalue()
    assert "[INFO] hello" in text
    assert "[OK] done" in text
    assert "[WARN] careful" in text
    assert "hidden" not in text
    assert "[ERROR] bad" in err.getvalue()


def test_verbose_shows_debug():
    logger, out, _ = _logger(verbose=True)
    logger.debug("trace")
    assert "[DEBUG] trace" in out.getvalue()


def test_quiet_keeps_errors():
    logger, out, err = _logger(quiet=True)
    logger.info("hello")
    logger.panel("summary")
    logger.error("bad")
    assert out.getvalue() == ""
    assert "bad" in err.getvalue()


def test_panel():
    logger, out, _ = _logger()
    logger.panel("All good", title="Summary")
    assert "All good" in out.getvalue()
    assert "Summary" in out.getvalue()


def test_null_logger_is_silent(capsys):
    log.NULL.info("x")
    log.NULL.error("y")
    log.NULL.panel("z")
    captured = capsys.readouterr()
    assert captured.out == "" and captured.err == ""
