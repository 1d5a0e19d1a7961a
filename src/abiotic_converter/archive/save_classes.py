#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
存档类与子头部生成

Steam 版 .sav 文件在通用头部和存档类名之后，
还带有按存档类区分的自定义头部：

- 世界 / 世界元数据: [FString "ABF_SAVE_VERSION"][版本: i32][1: i32][数据长度: i32]
- 角色:             [1: i32][数据长度: i32]
- 其他类:           无
"""

import io
from enum import Enum
from typing import Optional

from ..core.binary_io import BinaryWriter
from ..core.schema import ARCHIVE_MARKER

# 子头部中的固定标签值
SUB_HEADER_TAG = 1


class SaveClass(Enum):
    """已知存档类 (值为类路径)"""
    WORLD = "/Game/Blueprints/Saves/Abiotic_WorldSave.Abiotic_WorldSave_C"
    WORLD_METADATA = "/Game/Blueprints/Saves/Abiotic_WorldMetadataSave.Abiotic_WorldMetadataSave_C"
    CHARACTER = "/Game/Blueprints/Saves/Abiotic_CharacterSave.Abiotic_CharacterSave_C"
    UNKNOWN = ""

    @classmethod
    def from_class_path(cls, class_path: Optional[str]) -> 'SaveClass':
        """按类路径查找，未登记的类返回 UNKNOWN"""
        if class_path:
            for member in cls:
                if member.value == class_path:
                    return member
        return cls.UNKNOWN

    @property
    def has_version_header(self) -> bool:
        return self in (SaveClass.WORLD, SaveClass.WORLD_METADATA)

    def write_sub_header(self, writer: BinaryWriter, version: int, data_length: int) -> int:
        """
        写入子头部

        Args:
            writer: 写入器
            version: 归档头中的存档版本
            data_length: 紧随其后的数据长度

        Returns:
            写入的字节数
        """
        start = writer.position

        if self.has_version_header:
            writer.write_fstring(ARCHIVE_MARKER)
            writer.write_i32(version)
            writer.write_i32(SUB_HEADER_TAG)
            writer.write_i32(data_length)
        elif self is SaveClass.CHARACTER:
            writer.write_i32(SUB_HEADER_TAG)
            writer.write_i32(data_length)

        return writer.position - start

    def sub_header(self, version: int, data_length: int) -> bytes:
        """生成子头部字节"""
        buffer = io.BytesIO()
        self.write_sub_header(BinaryWriter(buffer), version, data_length)
        return buffer.getvalue()
