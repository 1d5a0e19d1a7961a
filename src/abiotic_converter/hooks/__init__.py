#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Hook 系统

提供解压算法的可插拔接口。
"""

from .base import CompressionHook
from .external import OodleLibraryLocator
from .oodle import OodleHook

__all__ = [
    # 抽象基类
    "CompressionHook",
    # Oodle
    "OodleHook",
    "OodleLibraryLocator",
]
