#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Steam 格式导出器

按条目表把解压后的归档数据拆分为独立的 .sav 文件。
每个输出文件的内容为:

    [模板头部][存档类名: FString][子头部][条目数据]

条目数据的偏移完全由声明的大小累加得到，数据中没有分隔符。
"""

import logging
import os
import posixpath
import shutil
from dataclasses import dataclass, field
from typing import List, Optional

from .reader import WorldArchive
from .save_classes import SaveClass
from ..core.binary_io import BinaryWriter
from ..core.schema import ArchiveHeader, FileEntry
from ..exceptions import IntegrityMismatchError, InvalidFormatError
from ..utils import normalize_path, strip_path_prefix, is_safe_relative_path

log = logging.getLogger(__name__)

# 虚拟路径必需的前缀
PROFILE_PREFIX = "Profile/"

# 输出文件扩展名
SAVE_EXTENSION = ".sav"

# 不在归档中、需从源目录复制的配置文件
SIDECAR_FILE_NAME = "SandboxSettings.ini"


@dataclass
class ExportResult:
    """导出结果"""
    written_files: List[str] = field(default_factory=list)
    skipped_entries: List[str] = field(default_factory=list)
    sidecar_files: List[str] = field(default_factory=list)
    missing_sidecars: List[str] = field(default_factory=list)
    total_bytes: int = 0
    cursor: int = 0

    @property
    def written_count(self) -> int:
        return len(self.written_files)


class SteamExporter:
    """
    Steam 格式导出器

    Usage:
        exporter = SteamExporter(output_dir, "Profile", template_header, source_root=input_dir)
        result = exporter.export(WorldArchive.load(path))
    """

    def __init__(
        self,
        output_directory: str,
        profile_folder: str,
        template_header: bytes,
        source_root: Optional[str] = None,
        extension: str = SAVE_EXTENSION
    ):
        """
        初始化导出器

        Args:
            output_directory: 输出根目录
            profile_folder: 输出根目录下的用户目录名
            template_header: 每个输出文件开头的模板头部
            source_root: 源存档目录，用于解析外部配置文件的相对路径
            extension: 输出文件扩展名
        """
        self._profile_directory = os.path.join(output_directory, profile_folder)
        self._template_header = bytes(template_header)
        self._source_root = source_root
        self._extension = extension

    @property
    def profile_directory(self) -> str:
        return self._profile_directory

    def export(self, archive: WorldArchive) -> ExportResult:
        """导出已加载的归档"""
        return self.export_payload(archive.header, archive.payload)

    def export_payload(self, header: ArchiveHeader, payload: bytes) -> ExportResult:
        """
        按条目表导出数据

        Args:
            header: 归档头 (条目表与版本)
            payload: 解压后的数据

        Returns:
            导出结果

        Raises:
            IntegrityMismatchError: 条目大小之和与数据长度不一致。
                已写出的文件保留，部分结果在异常的 result 属性中。
            InvalidFormatError: 条目路径会写到用户目录之外
        """
        result = ExportResult()
        view = memoryview(payload)
        length = len(view)
        cursor = 0

        for entry in header.entries:
            end = cursor + entry.size
            if end > length:
                result.cursor = cursor
                raise IntegrityMismatchError(
                    length, end, result,
                    message=f"条目 '{entry.path}' 超出数据范围"
                )

            if not entry.has_save_class:
                if self._is_sidecar(entry):
                    self._copy_sidecar(entry, result)
                else:
                    log.debug("跳过无存档类的条目: %s", entry.path)
                    result.skipped_entries.append(entry.path)
                cursor = end
                continue

            output_path = self._output_path(entry)
            self._write_save(output_path, entry, view[cursor:end], header.version)

            result.written_files.append(output_path)
            result.total_bytes += entry.size
            cursor = end

        result.cursor = cursor
        if cursor != length:
            raise IntegrityMismatchError(length, cursor, result)

        return result

    def _output_path(self, entry: FileEntry) -> str:
        relative, found = strip_path_prefix(entry.path, PROFILE_PREFIX)
        if not found:
            log.debug("源路径不以 '%s' 开头: %s", PROFILE_PREFIX, entry.path)

        if not is_safe_relative_path(relative):
            raise InvalidFormatError(f"条目路径超出输出目录: {entry.path!r}")

        return os.path.join(self._profile_directory, *f"{relative}{self._extension}".split("/"))

    def _write_save(self, output_path: str, entry: FileEntry, data: memoryview, version: int) -> None:
        os.makedirs(os.path.dirname(output_path), exist_ok=True)

        save_class = SaveClass.from_class_path(entry.save_class)
        if save_class is SaveClass.UNKNOWN:
            log.debug("未知存档类，不写子头部: %s (%s)", entry.save_class, entry.path)

        with open(output_path, 'wb') as f:
            writer = BinaryWriter(f)
            writer.write_bytes(self._template_header)
            writer.write_fstring(entry.save_class)
            save_class.write_sub_header(writer, version, len(data))
            writer.write_bytes(data)

    def _is_sidecar(self, entry: FileEntry) -> bool:
        name = posixpath.basename(normalize_path(entry.path))
        return name.lower() == SIDECAR_FILE_NAME.lower()

    def _copy_sidecar(self, entry: FileEntry, result: ExportResult) -> None:
        """
        从源目录复制外部配置文件

        失败只记录警告，不影响导出。
        """
        source_path = self._sidecar_source(entry.path)

        relative, found = strip_path_prefix(entry.path, PROFILE_PREFIX)
        if not found and os.path.isabs(entry.path):
            relative = posixpath.basename(relative)

        if source_path is None or not os.path.isfile(source_path):
            log.warning(
                "无法包含 %s，源文件不可访问: %s",
                SIDECAR_FILE_NAME, source_path or entry.path
            )
            result.missing_sidecars.append(entry.path)
            return

        if not is_safe_relative_path(relative):
            log.warning("无法包含 %s，路径超出输出目录: %s", SIDECAR_FILE_NAME, entry.path)
            result.missing_sidecars.append(entry.path)
            return

        output_path = os.path.join(self._profile_directory, *relative.split("/"))
        try:
            os.makedirs(os.path.dirname(output_path), exist_ok=True)
            shutil.copyfile(source_path, output_path)
        except OSError as e:
            log.warning("无法复制 %s 到 %s: %s", source_path, output_path, e)
            result.missing_sidecars.append(entry.path)
            return

        result.sidecar_files.append(output_path)

    def _sidecar_source(self, virtual_path: str) -> Optional[str]:
        if os.path.isabs(virtual_path):
            return virtual_path
        if self._source_root is None:
            return None
        return os.path.join(self._source_root, *normalize_path(virtual_path).split("/"))


def export_for_steam(
    header: ArchiveHeader,
    payload: bytes,
    output_directory: str,
    profile_folder: str,
    template_header: bytes,
    source_root: Optional[str] = None
) -> ExportResult:
    """导出的函数式入口，参数含义同 SteamExporter"""
    exporter = SteamExporter(output_directory, profile_folder, template_header, source_root)
    return exporter.export_payload(header, payload)
