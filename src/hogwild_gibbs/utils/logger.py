# -*- coding: utf-8 -*-
"""
日志记录器

实现功能：
    - setup_logger: 控制台（终端下彩色）+ 可选文件输出，支持按大小或按时间轮转
    - ProgressLogger: 按步数或时间间隔打印 sweep 进度与 ETA
    - PerformanceMonitor: 命名计时器与计数器，运行结束时输出摘要
"""

from __future__ import annotations

import logging
import sys
import time
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Union

__all__ = ['setup_logger', 'get_logger', 'ProgressLogger', 'PerformanceMonitor']

_DATEFMT = '%Y-%m-%d %H:%M:%S'


# -----------------------------------------------------------------------------
# Colored terminal formatter (only affects console handler)
# -----------------------------------------------------------------------------
class ColoredFormatter(logging.Formatter):
    """控制台彩色格式化器：临时给 levelname 加颜色码，格式化后恢复。"""
    COLORS = {
        'DEBUG': '\033[36m',    # cyan
        'INFO': '\033[32m',     # green
        'WARNING': '\033[33m',  # yellow
        'ERROR': '\033[31m',    # red
        'CRITICAL': '\033[35m', # magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        orig_levelname = record.levelname
        try:
            color = self.COLORS.get(orig_levelname)
            if color:
                record.levelname = f"{color}{orig_levelname}{self.RESET}"
            return super().format(record)
        finally:
            record.levelname = orig_levelname


# -----------------------------------------------------------------------------
# Handler 工厂
# -----------------------------------------------------------------------------
def _make_console_handler(level: int, use_color: bool, utc: bool) -> logging.Handler:
    if use_color:
        formatter: logging.Formatter = ColoredFormatter('%(asctime)s | %(levelname)s | %(message)s', datefmt=_DATEFMT)
    else:
        formatter = logging.Formatter('%(asctime)s | %(levelname)-8s | %(message)s', datefmt=_DATEFMT)
    if utc:
        formatter.converter = time.gmtime  # type: ignore
    # 控制台输出的是结果文本，日志走 stderr
    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(formatter)
    return ch


def _make_file_handler(log_path: Path, rotate: Optional[Dict[str, Any]], utc: bool) -> logging.Handler:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    if rotate:
        if 'when' in rotate:
            fh: logging.Handler = TimedRotatingFileHandler(
                str(log_path),
                when=rotate.get('when', 'D'),
                interval=int(rotate.get('interval', 1)),
                backupCount=int(rotate.get('backupCount', 14)),
                encoding='utf-8',
                utc=utc,
            )
        else:
            fh = RotatingFileHandler(
                str(log_path),
                maxBytes=int(rotate.get('maxBytes', 10_000_000)),
                backupCount=int(rotate.get('backupCount', 5)),
                encoding='utf-8',
            )
    else:
        fh = logging.FileHandler(str(log_path), mode='a', encoding='utf-8')
    fh.setLevel(logging.DEBUG)  # logger.level 决定实际输出
    formatter = logging.Formatter('%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s',
                                  datefmt=_DATEFMT)
    if utc:
        formatter.converter = time.gmtime  # type: ignore
    fh.setFormatter(formatter)
    return fh


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        value = logging.getLevelName(level.strip().upper())
        if not isinstance(value, int):
            raise ValueError(f"Unknown log level: {level!r}")
        return value
    return int(level)


# -----------------------------------------------------------------------------
# setup_logger / get_logger
# -----------------------------------------------------------------------------
def setup_logger(
    name: str = 'hogwild_gibbs',
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    use_color: bool = True,
    utc: bool = False,
    rotate: Optional[Dict[str, Any]] = None,
) -> logging.Logger:
    """
    配置并返回 logger。重复调用会替换同名 logger 的 handlers（避免重复输出）。
    子模块 logger（hogwild_gibbs.core.* 等）经由传播写到这里配置的 handlers。
    """
    level = _coerce_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(level)

    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = False

    # 仅在真实终端时启用颜色
    use_color = bool(use_color and hasattr(sys.stderr, "isatty") and sys.stderr.isatty())
    logger.addHandler(_make_console_handler(level, use_color, utc))
    if log_file:
        logger.addHandler(_make_file_handler(Path(log_file), rotate, utc))
    return logger


def get_logger(name: str = 'hogwild_gibbs') -> logging.Logger:
    """获取 logger（若未 setup，返回同名 logger 对象，但不自动配置 handlers）。"""
    return logging.getLogger(name)


# -----------------------------------------------------------------------------
# ProgressLogger
# -----------------------------------------------------------------------------
class ProgressLogger:
    """按步数或时间间隔打印进度的简单工具。"""
    def __init__(self, total: int, desc: str = "Progress",
                 logger: Optional[logging.Logger] = None,
                 log_every_n: int = 10,
                 log_every_seconds: Optional[float] = None):
        self.total = int(total)
        self.desc = desc
        self.logger = logger or get_logger()
        self.log_every_n = max(1, int(log_every_n))
        self.log_every_seconds = float(log_every_seconds) if log_every_seconds is not None else None

        self.current = 0
        self.start_time = time.time()
        self.last_log_time = self.start_time

    def update(self, n: int = 1):
        self.current = min(self.total, self.current + int(n))
        now = time.time()
        should = (self.current % self.log_every_n == 0) or (self.current >= self.total)
        if self.log_every_seconds is not None:
            should = should or ((now - self.last_log_time) >= self.log_every_seconds)
        if should:
            self._log_progress(now)
            self.last_log_time = now

    def _log_progress(self, now: Optional[float] = None):
        if now is None:
            now = time.time()
        elapsed = max(1e-9, now - self.start_time)
        percent = 100.0 * self.current / max(1, self.total)
        speed = self.current / elapsed
        eta = max(0, self.total - self.current) / max(speed, 1e-9)
        self.logger.info(
            "%s: %d/%d (%.1f%%) | %.2f it/s | ETA: %.1fs",
            self.desc, self.current, self.total, percent, speed, eta
        )

    def finish(self):
        elapsed = max(1e-9, time.time() - self.start_time)
        self.logger.info(
            "%s 完成! 总计: %d | 耗时: %.2fs | 速度: %.2f it/s",
            self.desc, self.current, elapsed, self.current / elapsed
        )


# -----------------------------------------------------------------------------
# PerformanceMonitor
# -----------------------------------------------------------------------------
class PerformanceMonitor:
    """轻量性能监控（计时器/计数器/摘要）。"""
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger()
        self.timers: Dict[str, float] = {}
        self.elapsed: Dict[str, float] = {}
        self.counters: Dict[str, int] = {}

    def start_timer(self, name: str):
        self.timers[name] = time.perf_counter()

    def stop_timer(self, name: str, log: bool = True) -> Optional[float]:
        if name not in self.timers:
            self.logger.warning("计时器 '%s' 未启动", name)
            return None
        elapsed = time.perf_counter() - self.timers.pop(name)
        self.elapsed[name] = self.elapsed.get(name, 0.0) + elapsed
        if log:
            self.logger.info("%s: %.4f秒", name, elapsed)
        return elapsed

    def count(self, name: str, value: int = 1):
        self.counters[name] = self.counters.get(name, 0) + int(value)

    def get_counter(self, name: str) -> int:
        return int(self.counters.get(name, 0))

    def reset(self):
        self.timers.clear()
        self.elapsed.clear()
        self.counters.clear()

    def summary(self):
        self.logger.info("=" * 70)
        self.logger.info("性能统计:")
        if self.elapsed:
            self.logger.info("计时器:")
            for k, v in self.elapsed.items():
                self.logger.info("  %s: %.4fs", k, v)
        if self.counters:
            self.logger.info("计数器:")
            for k, v in self.counters.items():
                self.logger.info("  %s: %d", k, v)
        self.logger.info("=" * 70)
