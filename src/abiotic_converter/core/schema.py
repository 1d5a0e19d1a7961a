#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
数据结构定义

定义 Xbox 容器索引中的 ContainerId、ContainerHeader、ContainerFileEntry，
以及世界存档归档中的 ArchiveHeader、FileEntry。

每个结构都提供 read() / write()，字段顺序即磁盘布局。
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, List, Optional

from .binary_io import BinaryReader, BinaryWriter
from ..exceptions import MalformedIndexError, InvalidFormatError, BadMagicError
from ..utils import FILETIME_EPOCH


# ==================== 常量定义 ====================

# 归档开头的标记字符串 (同时用作世界存档子头部的属性名)
ARCHIVE_MARKER = "ABF_SAVE_VERSION"

# 容器文件支持的版本
CONTAINER_VERSION = 4

# 容器索引文件版本
INDEX_VERSION = 14

# 容器文件条目元数据的定长字符数 (128 字节)
METADATA_CHARS = 64


# ==================== Xbox 容器索引 ====================

@dataclass
class ContainerId:
    """
    容器标识

    由两个名称和一个以带引号十六进制文本存储的数值标签组成，
    如 "0x8DCF3C2A1B4E5F6"。
    """
    name: str = ""
    secondary_name: str = ""
    tag: int = 0

    @classmethod
    def read(cls, reader: BinaryReader) -> 'ContainerId':
        name = reader.read_xbox_string()
        secondary_name = reader.read_xbox_string()

        text = reader.read_xbox_string()
        digits = text.strip('"')[2:]
        try:
            tag = int(digits, 16)
        except ValueError:
            raise MalformedIndexError(f"无法解析容器标签 {text!r} ({name})")

        return cls(name=name, secondary_name=secondary_name, tag=tag)

    def write(self, writer: BinaryWriter) -> None:
        writer.write_xbox_string(self.name)
        writer.write_xbox_string(self.secondary_name)
        writer.write_xbox_string(f'"0x{self.tag:X}"')

    def __str__(self) -> str:
        return self.name


@dataclass
class ContainerHeader:
    """
    容器头

    位于 containers.index 中，描述一个逻辑容器。
    GUID 决定容器所在的子目录，sub_index 决定容器文件名。
    """
    container_id: ContainerId = field(default_factory=ContainerId)
    sub_index: int = 0          # u8, 容器文件后缀
    guid: uuid.UUID = uuid.UUID(int=0)
    timestamp: datetime = FILETIME_EPOCH
    size: int = 0               # 声明的字节数
    flags: int = 1              # 保留 (通常为 1)

    @property
    def name(self) -> str:
        """主名称"""
        return self.container_id.name

    @property
    def directory_name(self) -> str:
        """容器目录名 (大写十六进制，无分隔符)"""
        return self.guid.hex.upper()

    @property
    def file_name(self) -> str:
        """容器文件名"""
        return f"container.{self.sub_index}"

    @classmethod
    def read(cls, reader: BinaryReader) -> 'ContainerHeader':
        container_id = ContainerId.read(reader)
        sub_index = reader.read_u8()
        flags = reader.read_i32()
        guid = reader.read_guid()
        timestamp = reader.read_filetime()
        reader.skip(8)  # 保留，两个 i32 0
        size = reader.read_i64()

        return cls(
            container_id=container_id,
            sub_index=sub_index,
            guid=guid,
            timestamp=timestamp,
            size=size,
            flags=flags
        )

    def write(self, writer: BinaryWriter) -> None:
        self.container_id.write(writer)
        writer.write_u8(self.sub_index)
        writer.write_i32(self.flags)
        writer.write_guid(self.guid)
        writer.write_filetime(self.timestamp)
        writer.write_i32(0)
        writer.write_i32(0)
        writer.write_i64(self.size)

    def __str__(self) -> str:
        return f"{self.guid} [{self.container_id}]"


@dataclass
class ContainerFileEntry:
    """
    容器文件条目 (128 + 16 + 16 bytes)

    data_guid 决定磁盘上实际数据文件的名称。
    """
    SIZE: ClassVar[int] = METADATA_CHARS * 2 + 32

    metadata: str = ""
    guid: uuid.UUID = uuid.UUID(int=0)
    data_guid: uuid.UUID = uuid.UUID(int=0)

    @property
    def data_file_name(self) -> str:
        """数据文件名 (大写十六进制，无分隔符)"""
        return self.data_guid.hex.upper()

    @classmethod
    def read(cls, reader: BinaryReader) -> 'ContainerFileEntry':
        metadata = reader.read_fixed_utf16(METADATA_CHARS)
        guid = reader.read_guid()
        data_guid = reader.read_guid()
        return cls(metadata=metadata, guid=guid, data_guid=data_guid)

    def write(self, writer: BinaryWriter) -> None:
        writer.write_fixed_utf16(self.metadata, METADATA_CHARS)
        writer.write_guid(self.guid)
        writer.write_guid(self.data_guid)

    def __str__(self) -> str:
        return str(self.guid)


# ==================== 世界存档归档 ====================

@dataclass
class FileEntry:
    """
    归档中的虚拟文件条目

    条目数据按声明顺序紧密排列在解压后的数据中，
    第 i 个条目的起始偏移等于前 i 个条目大小之和。
    save_class 为空表示该条目不属于导出的存档树。
    """
    path: str = ""
    size: int = 0
    save_class: Optional[str] = None
    reserved: int = 0

    @classmethod
    def read(cls, reader: BinaryReader) -> 'FileEntry':
        path = reader.read_fstring()
        size = reader.read_i32()
        save_class = reader.read_fstring()
        reserved = reader.read_i32()

        if path is None:
            raise InvalidFormatError("归档条目缺少路径")
        if size < 0:
            raise InvalidFormatError(
                f"归档条目 '{path}' 大小无效", expected=">= 0", actual=str(size)
            )

        return cls(path=path, size=size, save_class=save_class, reserved=reserved)

    def write(self, writer: BinaryWriter) -> None:
        writer.write_fstring(self.path)
        writer.write_i32(self.size)
        writer.write_fstring(self.save_class)
        writer.write_i32(self.reserved)

    @property
    def has_save_class(self) -> bool:
        return bool(self.save_class)

    def __str__(self) -> str:
        return self.path


@dataclass
class ArchiveHeader:
    """
    世界存档归档头

    布局:
        [标记: FString "ABF_SAVE_VERSION"]
        [版本: i32][解压大小: i32][保留: i32]
        [条目数: i32][FileEntry * 条目数]
        [保留: i32][压缩大小: i32][压缩数据]
    """
    version: int = 3
    decompressed_size: int = 0
    entries: List[FileEntry] = field(default_factory=list)
    compressed_data: bytes = field(default=b'', repr=False)
    reserved1: int = 16
    reserved2: int = 1

    @property
    def compressed_size(self) -> int:
        return len(self.compressed_data)

    @property
    def total_entry_size(self) -> int:
        """条目声明大小之和"""
        return sum(entry.size for entry in self.entries)

    @classmethod
    def read(cls, reader: BinaryReader) -> 'ArchiveHeader':
        marker = reader.read_fstring()
        if marker != ARCHIVE_MARKER:
            raise BadMagicError(
                "存档缺少标记字符串",
                expected=ARCHIVE_MARKER,
                actual=repr(marker)
            )

        version = reader.read_i32()
        decompressed_size = reader.read_i32()
        reserved1 = reader.read_i32()

        count = reader.read_i32()
        if count < 0:
            raise InvalidFormatError("条目数无效", expected=">= 0", actual=str(count))
        entries = [FileEntry.read(reader) for _ in range(count)]

        reserved2 = reader.read_i32()
        compressed_size = reader.read_i32()
        compressed_data = reader.read_bytes(compressed_size)

        if decompressed_size < 0:
            raise InvalidFormatError(
                "解压大小无效", expected=">= 0", actual=str(decompressed_size)
            )

        return cls(
            version=version,
            decompressed_size=decompressed_size,
            entries=entries,
            compressed_data=compressed_data,
            reserved1=reserved1,
            reserved2=reserved2
        )

    def write(self, writer: BinaryWriter) -> None:
        writer.write_fstring(ARCHIVE_MARKER)
        writer.write_i32(self.version)
        writer.write_i32(self.decompressed_size)
        writer.write_i32(self.reserved1)
        writer.write_i32(len(self.entries))
        for entry in self.entries:
            entry.write(writer)
        writer.write_i32(self.reserved2)
        writer.write_i32(self.compressed_size)
        writer.write_bytes(self.compressed_data)
