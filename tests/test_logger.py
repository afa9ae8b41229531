# -*- coding: utf-8 -*-
"""日志工具测试：handler 配置、文件输出、进度与性能统计。"""

import logging

import pytest

from hogwild_gibbs.utils import logger as lg


def _close(log):
    for h in list(log.handlers):
        log.removeHandler(h)
        h.close()


def test_setup_logger_replaces_handlers(tmp_path):
    log = lg.setup_logger("hw_test_a", level="debug", use_color=False)
    log = lg.setup_logger("hw_test_a", level=logging.INFO, log_file=str(tmp_path / "a" / "run.log"))
    try:
        assert log.level == logging.INFO
        assert len(log.handlers) == 2
        assert log.propagate is False
        log.info("hello %d", 7)
        for h in log.handlers:
            h.flush()
        text = (tmp_path / "a" / "run.log").read_text(encoding="utf-8")
        assert "hello 7" in text
        assert "hw_test_a" in text
    finally:
        _close(log)


@pytest.mark.parametrize("rotate", [{"maxBytes": 1000, "backupCount": 1}, {"when": "D", "interval": 1}])
def test_rotating_handlers(tmp_path, rotate):
    log = lg.setup_logger("hw_test_b", log_file=str(tmp_path / "r.log"), rotate=rotate)
    try:
        kinds = {type(h).__name__ for h in log.handlers}
        assert kinds & {"RotatingFileHandler", "TimedRotatingFileHandler"}
    finally:
        _close(log)


def test_bad_level():
    with pytest.raises(ValueError):
        lg.setup_logger("hw_test_c", level="loud")


def test_progress_logger(caplog):
    log = logging.getLogger("hw_test_progress")
    prog = lg.ProgressLogger(10, desc="sweeps", logger=log, log_every_n=5)
    with caplog.at_level(logging.INFO, logger="hw_test_progress"):
        for _ in range(12):
            prog.update()
        prog.finish()
    assert prog.current == 10
    msgs = [r.getMessage() for r in caplog.records]
    assert any("sweeps: 5/10" in m for m in msgs)
    assert any("sweeps: 10/10" in m for m in msgs)


def test_performance_monitor():
    pm = lg.PerformanceMonitor(logging.getLogger("hw_test_perf"))
    pm.start_timer("a")
    assert pm.stop_timer("a", log=False) >= 0.0
    pm.start_timer("a")
    pm.stop_timer("a", log=False)
    assert "a" in pm.elapsed
    assert pm.stop_timer("missing") is None
    pm.count("flips", 3)
    pm.count("flips")
    assert pm.get_counter("flips") == 4
    pm.summary()
    pm.reset()
    assert pm.get_counter("flips") == 0 and not pm.elapsed
