#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
存档转换流程

把一个 Microsoft Store 用户目录下的全部世界存档转换为 Steam 格式:

    containers.index -> 世界存档容器 -> 容器文件 -> 数据文件 (归档)
        -> 解压 -> 按条目拆分为 .sav
"""

import logging
import os
import shutil
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from .archive import WorldArchive, SteamExporter, ExportResult
from .core.schema import ContainerHeader
from .exceptions import ConverterError, SaveIOError, WrongApplicationError, NoWorldSaveFoundError
from .hooks.base import CompressionHook
from .xbox import ContainerIndex, world_name

log = logging.getLogger(__name__)

# 游戏在 containers.index 中的应用名
APP_NAME = "AppAbioticFactorShipping"


@dataclass
class WorldSaveInfo:
    """世界存档概要 (只读查询用)"""
    name: str
    timestamp: datetime
    header: ContainerHeader = field(repr=False)


@dataclass
class ConversionResult:
    """
    转换结果

    每个世界存档容器要么在 converted 中，要么在 failed 中。
    """
    output_directory: str = ""
    converted: List[Tuple[str, ExportResult]] = field(default_factory=list)
    failed: List[Tuple[str, Exception]] = field(default_factory=list)
    elapsed_time: float = 0.0

    @property
    def success_count(self) -> int:
        return len(self.converted)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def total_count(self) -> int:
        return self.success_count + self.failed_count

    @property
    def total_files(self) -> int:
        return sum(r.written_count for _, r in self.converted)

    @property
    def success(self) -> bool:
        return not self.failed


def load_index(input_directory: str) -> ContainerIndex:
    """
    读取并校验容器索引

    Raises:
        SaveIOError: 索引缺失或被截断
        MalformedIndexError: 索引无法解析
        WrongApplicationError: 存档不属于本游戏
    """
    index = ContainerIndex.load(input_directory)
    if index.app_name != APP_NAME:
        raise WrongApplicationError(index.app_name, APP_NAME)
    return index


def list_world_saves(input_directory: str) -> List[WorldSaveInfo]:
    """
    列出用户目录中的世界存档 (不含备份)

    不写入任何文件。
    """
    index = load_index(input_directory)
    return [
        WorldSaveInfo(name=world_name(h), timestamp=h.timestamp, header=h)
        for h in index.world_save_headers()
    ]


def convert_profile(
    input_directory: str,
    output_root: str,
    profile_folder: str,
    template_header: bytes,
    compression_hook: Optional[CompressionHook] = None,
    clean_output: bool = True
) -> ConversionResult:
    """
    转换一个用户目录下的全部世界存档

    Args:
        input_directory: containers.index 所在目录
        output_root: 输出根目录
        profile_folder: 输出根目录下的用户目录名
        template_header: Steam 存档模板头部
        compression_hook: 解压钩子，默认使用 OodleHook
        clean_output: 转换前删除并重建输出用户目录

    Returns:
        转换结果。单个容器失败只记录在 failed 中，不中止其余容器。

    Raises:
        SaveIOError / MalformedIndexError: 索引无法读取
        WrongApplicationError: 存档不属于本游戏 (不写入任何文件)
        NoWorldSaveFoundError: 没有世界存档 (不写入任何文件)
        SaveIOError: 输出用户目录无法清理或创建
    """
    start_time = time.time()

    index = load_index(input_directory)
    headers = index.world_save_headers()
    if not headers:
        raise NoWorldSaveFoundError()

    if compression_hook is None:
        from .hooks.oodle import OodleHook
        compression_hook = OodleHook()

    exporter = SteamExporter(output_root, profile_folder, template_header, source_root=input_directory)
    profile_directory = exporter.profile_directory
    try:
        if clean_output and os.path.isdir(profile_directory):
            shutil.rmtree(profile_directory)
        os.makedirs(profile_directory, exist_ok=True)
    except OSError as e:
        raise SaveIOError(f"无法准备输出目录 ({e.strerror or e})", profile_directory) from e

    result = ConversionResult(output_directory=profile_directory)

    for header in headers:
        name = world_name(header)
        log.info("正在转换世界: %s", name)
        try:
            container = index.load_container(header)
            data_path = container.data_file_path(input_directory)
            archive = WorldArchive.load(data_path, compression_hook)
            export = exporter.export(archive)
        except (ConverterError, OSError) as e:
            log.error("世界 '%s' 转换失败: %s", name, e)
            result.failed.append((name, e))
            continue

        log.debug("世界 '%s': 写出 %d 个文件, %d 字节", name, export.written_count, export.total_bytes)
        result.converted.append((name, export))

    result.elapsed_time = time.time() - start_time
    log.info(
        "转换完成: 成功 %d, 失败 %d, 共写出 %d 个文件 (%.2f 秒)",
        result.success_count, result.failed_count, result.total_files, result.elapsed_time
    )
    return result
