#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
世界存档归档读取器

Xbox 版世界存档把一个世界的全部 .sav 文件打包为单个数据文件：
归档头 + 文件条目表 + 一整块压缩数据。读取时一次性解压到内存。
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..core.binary_io import BinaryReader
from ..core.schema import ArchiveHeader, FileEntry
from ..hooks.base import CompressionHook
from ..exceptions import SaveIOError, DecompressionFailedError, OodleNotFoundError

log = logging.getLogger(__name__)


@dataclass
class WorldArchive:
    """
    已加载的世界存档归档

    header 保存条目表，payload 为解压后的完整数据。
    """
    header: ArchiveHeader
    payload: bytes = field(default=b'', repr=False)

    @property
    def version(self) -> int:
        return self.header.version

    @property
    def entries(self) -> List[FileEntry]:
        return self.header.entries

    def __iter__(self):
        # 支持 header, payload = WorldArchive.load(...)
        yield self.header
        yield self.payload

    @classmethod
    def load(
        cls,
        path: str,
        compression_hook: Optional[CompressionHook] = None
    ) -> 'WorldArchive':
        """
        加载世界存档归档

        Args:
            path: 归档数据文件路径
            compression_hook: 解压钩子，默认使用 OodleHook

        Returns:
            加载完成的归档

        Raises:
            SaveIOError: 文件缺失或被截断
            BadMagicError: 缺少 ABF_SAVE_VERSION 标记
            InvalidFormatError: 条目表无法解析 (如文本无法解码)
            DecompressionFailedError: 解压失败或长度不符
        """
        if compression_hook is None:
            from ..hooks.oodle import OodleHook
            compression_hook = OodleHook()

        try:
            file = open(path, 'rb')
        except OSError as e:
            raise SaveIOError(f"无法打开世界存档 ({e.strerror})", path) from e

        with file:
            header = ArchiveHeader.read(BinaryReader(file, path))

        log.debug(
            "归档 %s: 版本 %d, %d 个条目, 压缩 %d 字节, 解压 %d 字节",
            path, header.version, len(header.entries),
            header.compressed_size, header.decompressed_size
        )

        payload = decompress_payload(header, compression_hook)
        return cls(header=header, payload=payload)


def decompress_payload(header: ArchiveHeader, compression_hook: CompressionHook) -> bytes:
    """
    解压归档数据

    Raises:
        DecompressionFailedError: 钩子报错，或输出长度与声明的解压大小不一致
    """
    expected = header.decompressed_size

    try:
        payload = compression_hook.decompress(header.compressed_data, expected)
    except (DecompressionFailedError, OodleNotFoundError):
        raise
    except Exception as e:
        raise DecompressionFailedError(
            f"{compression_hook.name} 解压失败: [{type(e).__name__}] {e}"
        ) from e

    if len(payload) != expected:
        raise DecompressionFailedError(
            "解压后长度与声明不符",
            expected_size=expected,
            actual_size=len(payload)
        )

    return payload
