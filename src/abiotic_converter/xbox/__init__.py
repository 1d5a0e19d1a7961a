#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Xbox (Microsoft Store) 存档容器格式

提供 containers.index 与容器文件的读取功能。
"""

from .container import Container
from .index import (
    ContainerIndex,
    INDEX_FILE_NAME,
    WORLD_SAVE_SUFFIX,
    is_world_save,
    world_name,
)

__all__ = [
    "Container",
    "ContainerIndex",
    "INDEX_FILE_NAME",
    "WORLD_SAVE_SUFFIX",
    "is_world_save",
    "world_name",
]
