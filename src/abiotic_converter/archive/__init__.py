#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
世界存档归档

提供归档的读取和 Steam 格式导出功能。
"""

from .reader import WorldArchive, decompress_payload
from .save_classes import SaveClass
from .exporter import SteamExporter, ExportResult, export_for_steam

__all__ = [
    "WorldArchive",
    "decompress_payload",
    "SaveClass",
    "SteamExporter",
    "ExportResult",
    "export_for_steam",
]
