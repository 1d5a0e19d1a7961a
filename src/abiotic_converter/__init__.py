#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
abiotic_converter - Abiotic Factor 存档平台转换工具

将 Microsoft Store (Xbox) 版的世界存档容器转换为 Steam 版 .sav 文件。
"""

__version__ = "0.1.0"

# 异常类
from .exceptions import (
    ConverterError,
    SaveIOError,
    InvalidFormatError,
    BadMagicError,
    MalformedIndexError,
    UnsupportedVersionError,
    DecompressionFailedError,
    WrongApplicationError,
    NoWorldSaveFoundError,
    IntegrityMismatchError,
    OodleNotFoundError,
)

# Xbox 容器
from .xbox import ContainerIndex, Container

# 世界存档归档
from .archive import WorldArchive, SteamExporter, ExportResult, SaveClass, export_for_steam

# 转换流程
from .converter import APP_NAME, WorldSaveInfo, ConversionResult, list_world_saves, convert_profile

# 模板头部
from .template import load_template_header, extract_template_header, create_template_header

# Hooks
from .hooks import CompressionHook, OodleHook, OodleLibraryLocator

__all__ = [
    # 版本
    "__version__",
    # 异常
    "ConverterError",
    "SaveIOError",
    "InvalidFormatError",
    "BadMagicError",
    "MalformedIndexError",
    "UnsupportedVersionError",
    "DecompressionFailedError",
    "WrongApplicationError",
    "NoWorldSaveFoundError",
    "IntegrityMismatchError",
    "OodleNotFoundError",
    # Xbox
    "ContainerIndex",
    "Container",
    # 归档
    "WorldArchive",
    "SteamExporter",
    "ExportResult",
    "SaveClass",
    "export_for_steam",
    # 转换
    "APP_NAME",
    "WorldSaveInfo",
    "ConversionResult",
    "list_world_saves",
    "convert_profile",
    # 模板
    "load_template_header",
    "extract_template_header",
    "create_template_header",
    # Hooks
    "CompressionHook",
    "OodleHook",
    "OodleLibraryLocator",
]
