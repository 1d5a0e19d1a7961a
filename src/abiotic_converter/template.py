#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Steam 存档模板头部

每个导出的 .sav 文件都以同一段模板头部开头:
GVAS 魔法值 + 通用头部 (存档版本、包版本、引擎版本) + 自定义版本表。

模板头部从任意一个较新的 Steam 版 (或专用服务器) 存档中截取，
默认保存在包目录下的 resources/SaveHeader.dat。
"""

import io
import logging
import os
from pathlib import Path
from typing import Optional

from .core.binary_io import BinaryReader
from .exceptions import SaveIOError, BadMagicError, InvalidFormatError, UnsupportedVersionError

log = logging.getLogger(__name__)

# 环境变量: 模板头部路径
ENV_VAR = 'ABIOTIC_SAVE_HEADER'

# 默认模板头部路径
DEFAULT_HEADER_PATH = Path(__file__).parent / 'resources' / 'SaveHeader.dat'

GVAS_MAGIC = b'GVAS'

# 引入 UE5 包版本号的存档版本
SAVE_GAME_VERSION_UE5 = 3

# 自定义版本表格式
CUSTOM_VERSION_ENUMS = 1
CUSTOM_VERSION_GUIDS = 2
CUSTOM_VERSION_OPTIMIZED = 3


def resolve_template_path(path: Optional[str] = None) -> str:
    """
    确定模板头部路径

    优先级: 显式路径 > 环境变量 > 包内默认路径
    """
    if path:
        return path
    env_path = os.environ.get(ENV_VAR)
    if env_path:
        return env_path
    return str(DEFAULT_HEADER_PATH)


def load_template_header(path: Optional[str] = None) -> bytes:
    """
    读取模板头部

    Raises:
        SaveIOError: 文件缺失或无法读取
        InvalidFormatError: 文件为空
    """
    header_path = resolve_template_path(path)

    try:
        with open(header_path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise SaveIOError(f"无法读取存档模板头部 ({e.strerror})", header_path) from e

    if not data:
        raise InvalidFormatError(f"存档模板头部为空: {header_path}")

    return data


def extract_template_header(data: bytes, name: Optional[str] = None) -> bytes:
    """
    从 Steam 存档中截取模板头部

    截取范围为文件开头到存档类名 FString 之前。

    Args:
        data: Steam .sav 文件内容
        name: 用于错误信息的来源名称

    Returns:
        模板头部字节

    Raises:
        BadMagicError: 不是 GVAS 存档
        UnsupportedVersionError: 未知的自定义版本表格式
        SaveIOError: 数据被截断
    """
    reader = BinaryReader(io.BytesIO(data), name)

    magic = reader.read_bytes(4)
    if magic != GVAS_MAGIC:
        raise BadMagicError("不是 GVAS 存档", expected=repr(GVAS_MAGIC), actual=repr(magic))

    save_game_version = reader.read_i32()
    reader.read_i32()  # UE4 包版本
    if save_game_version >= SAVE_GAME_VERSION_UE5:
        reader.read_i32()  # UE5 包版本

    # 引擎版本
    reader.read_u16()
    reader.read_u16()
    reader.read_u16()
    reader.read_u32()
    reader.read_fstring()

    custom_format = reader.read_i32()
    count = reader.read_i32()
    if count < 0:
        raise InvalidFormatError("自定义版本数量无效", expected=">= 0", actual=str(count))

    for _ in range(count):
        if custom_format == CUSTOM_VERSION_ENUMS:
            reader.skip(4)
            reader.read_i32()
        elif custom_format == CUSTOM_VERSION_GUIDS:
            reader.read_guid()
            reader.read_i32()
            reader.read_fstring()
        elif custom_format == CUSTOM_VERSION_OPTIMIZED:
            reader.read_guid()
            reader.read_i32()
        else:
            raise UnsupportedVersionError(
                custom_format,
                [CUSTOM_VERSION_ENUMS, CUSTOM_VERSION_GUIDS, CUSTOM_VERSION_OPTIMIZED],
                name
            )

    return data[:reader.position]


def create_template_header(source_path: str, output_path: Optional[str] = None) -> str:
    """
    以 Steam 存档为模板生成模板头部文件

    Args:
        source_path: Steam 版 .sav 文件
        output_path: 输出路径，默认为包内 resources/SaveHeader.dat

    Returns:
        输出路径
    """
    try:
        with open(source_path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise SaveIOError(f"无法读取源存档 ({e.strerror})", source_path) from e

    header = extract_template_header(data, source_path)

    output_path = os.path.abspath(output_path or str(DEFAULT_HEADER_PATH))
    os.makedirs(os.path.dirname(output_path), exist_ok=True)
    with open(output_path, 'wb') as f:
        f.write(header)

    log.info("已生成存档模板头部 (%d 字节): %s", len(header), output_path)
    return output_path
