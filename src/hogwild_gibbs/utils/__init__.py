# -*- coding: utf-8 -*-
"""
工具层
======

提供日志配置与实验配置管理。

子模块
------
- logger: 日志工具
- config: 实验配置

示例
----
>>> from hogwild_gibbs.utils import logger, config
>>> log = logger.setup_logger('hogwild_gibbs', level='INFO')
>>> cfg = config.get_preset_config('lattice')
"""


# hogwild_gibbs/utils/__init__.py
from importlib import import_module
from typing import TYPE_CHECKING

__all__ = ["logger", "config"]

_lazy = {
    "logger": ".logger",
    "config": ".config",
}

def __getattr__(name: str):
    if name in _lazy:
        mod = import_module(_lazy[name], __name__)
        globals()[name] = mod
        return mod
    raise AttributeError(f"{__name__} has no attribute {name!r}")

def __dir__():
    return sorted(list(__all__))

if TYPE_CHECKING:
    from . import logger, config
