#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
核心模块

提供二进制 I/O 封装和数据结构定义。
"""

from .binary_io import BinaryReader, BinaryWriter
from .schema import (
    ARCHIVE_MARKER,
    CONTAINER_VERSION,
    INDEX_VERSION,
    ContainerId,
    ContainerHeader,
    ContainerFileEntry,
    FileEntry,
    ArchiveHeader,
)

__all__ = [
    "BinaryReader",
    "BinaryWriter",
    "ARCHIVE_MARKER",
    "CONTAINER_VERSION",
    "INDEX_VERSION",
    "ContainerId",
    "ContainerHeader",
    "ContainerFileEntry",
    "FileEntry",
    "ArchiveHeader",
]
