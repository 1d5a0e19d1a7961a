#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
二进制 I/O 封装

提供 BinaryWriter 和 BinaryReader 类，封装所有底层文件操作，
使上层模块不需要直接操作文件指针。

除基础整数外，还实现了两种平台字符串编码：

- Xbox 字符串: [字符数: i32][UTF-16LE 字符]，无结束符
- Unreal FString: [长度: i32][字节]，正数为单字节文本，负数为 UTF-16LE，
  两者都包含结尾的 NUL；长度 0 表示空值 (None)
"""

import struct
import uuid
from datetime import datetime
from typing import BinaryIO, Tuple, Any, Optional

from ..exceptions import SaveIOError, InvalidFormatError
from ..utils import filetime_to_datetime, datetime_to_filetime


class BinaryWriter:
    """
    二进制写入器

    封装所有底层写操作，提供类型化的写入方法。
    """

    def __init__(self, file: BinaryIO):
        """
        初始化写入器

        Args:
            file: 以 'wb' 模式打开的文件对象
        """
        self._file = file
        self._position = 0

    @property
    def position(self) -> int:
        """当前写入位置"""
        return self._position

    # ==================== 原始写入 ====================

    def write_bytes(self, data: bytes) -> int:
        """
        写入原始字节

        Args:
            data: 要写入的字节 (bytes / bytearray / memoryview)

        Returns:
            写入的字节数
        """
        written = self._file.write(data)
        self._position += written
        return written

    def write_struct(self, fmt: str, *values: Any) -> int:
        """按 struct 格式写入"""
        data = struct.pack(fmt, *values)
        return self.write_bytes(data)

    # ==================== 类型化写入 ====================

    def write_u8(self, value: int) -> int:
        """写入无符号 8 位整数"""
        return self.write_struct('<B', value)

    def write_u16(self, value: int) -> int:
        """写入无符号 16 位整数 (Little-Endian)"""
        return self.write_struct('<H', value)

    def write_u32(self, value: int) -> int:
        """写入无符号 32 位整数 (Little-Endian)"""
        return self.write_struct('<I', value)

    def write_i32(self, value: int) -> int:
        """写入有符号 32 位整数 (Little-Endian)"""
        return self.write_struct('<i', value)

    def write_i64(self, value: int) -> int:
        """写入有符号 64 位整数 (Little-Endian)"""
        return self.write_struct('<q', value)

    # ==================== 字符串写入 ====================

    def write_xbox_string(self, s: str) -> int:
        """
        写入 Xbox 字符串

        格式: [字符数: i32][UTF-16LE 字符]

        Returns:
            写入的总字节数
        """
        encoded = s.encode('utf-16-le')
        self.write_i32(len(encoded) // 2)
        return 4 + self.write_bytes(encoded)

    def write_fixed_utf16(self, s: str, char_count: int) -> int:
        """
        写入定长 UTF-16LE 文本，不足部分以 NUL 填充

        Raises:
            ValueError: 文本超出定长
        """
        encoded = s.encode('utf-16-le')
        size = char_count * 2
        if len(encoded) > size:
            raise ValueError(f"文本长度超出 {char_count} 个字符: {s!r}")
        return self.write_bytes(encoded.ljust(size, b'\x00'))

    def write_fstring(self, s: Optional[str]) -> int:
        """
        写入 Unreal FString

        可用 Latin-1 表示的文本以单字节形式写入，其余以 UTF-16LE 写入 (长度取负)。
        None 写为长度 0。
        """
        if s is None:
            return self.write_i32(0)

        try:
            encoded = s.encode('latin-1') + b'\x00'
            self.write_i32(len(encoded))
        except UnicodeEncodeError:
            encoded = s.encode('utf-16-le') + b'\x00\x00'
            self.write_i32(-(len(encoded) // 2))
        return 4 + self.write_bytes(encoded)

    # ==================== 复合类型写入 ====================

    def write_guid(self, value: uuid.UUID) -> int:
        """写入 16 字节 GUID (混合字节序，与 .NET Guid 一致)"""
        return self.write_bytes(value.bytes_le)

    def write_filetime(self, value: datetime) -> int:
        """写入 FILETIME (i64, 1601-01-01 起的 100ns 计数)"""
        return self.write_i64(datetime_to_filetime(value))


class BinaryReader:
    """
    二进制读取器

    封装所有底层读操作，提供类型化的读取方法。
    数据不足时统一抛出 SaveIOError。
    """

    def __init__(self, file: BinaryIO, name: Optional[str] = None):
        """
        初始化读取器

        Args:
            file: 以 'rb' 模式打开的文件对象
            name: 用于错误信息的来源名称 (通常是文件路径)
        """
        self._file = file
        self._name = name
        self._position = 0

    @property
    def position(self) -> int:
        """当前读取位置"""
        return self._position

    # ==================== 原始读取 ====================

    def read_bytes(self, size: int) -> bytes:
        """
        读取指定字节数

        Raises:
            InvalidFormatError: size 为负数
            SaveIOError: 文件不足请求的字节数
        """
        if size < 0:
            raise InvalidFormatError("无效的读取长度", expected=">= 0", actual=str(size))
        data = self._file.read(size)
        if len(data) < size:
            raise SaveIOError(
                f"文件结束: 偏移 {self._position} 处期望读取 {size} 字节，"
                f"实际只有 {len(data)} 字节",
                self._name
            )
        self._position += size
        return data

    def read_struct(self, fmt: str) -> Tuple[Any, ...]:
        """按 struct 格式读取"""
        size = struct.calcsize(fmt)
        data = self.read_bytes(size)
        return struct.unpack(fmt, data)

    # ==================== 类型化读取 ====================

    def read_u8(self) -> int:
        """读取无符号 8 位整数"""
        return self.read_struct('<B')[0]

    def read_u16(self) -> int:
        """读取无符号 16 位整数 (Little-Endian)"""
        return self.read_struct('<H')[0]

    def read_u32(self) -> int:
        """读取无符号 32 位整数 (Little-Endian)"""
        return self.read_struct('<I')[0]

    def read_i32(self) -> int:
        """读取有符号 32 位整数 (Little-Endian)"""
        return self.read_struct('<i')[0]

    def read_i64(self) -> int:
        """读取有符号 64 位整数 (Little-Endian)"""
        return self.read_struct('<q')[0]

    # ==================== 字符串读取 ====================

    def read_xbox_string(self) -> str:
        """
        读取 Xbox 字符串

        格式: [字符数: i32][UTF-16LE 字符]
        """
        count = self.read_i32()
        if count < 0:
            raise InvalidFormatError("无效的字符串长度", expected=">= 0", actual=str(count))
        return self._decode(self.read_bytes(count * 2), 'utf-16-le')

    def read_fixed_utf16(self, char_count: int) -> str:
        """读取定长 UTF-16LE 文本，并去除结尾的 NUL 填充"""
        data = self.read_bytes(char_count * 2)
        return self._decode(data, 'utf-16-le').rstrip('\x00')

    def read_fstring(self) -> Optional[str]:
        """
        读取 Unreal FString

        Returns:
            解码后的字符串 (不含结尾 NUL)；长度为 0 时返回 None
        """
        length = self.read_i32()
        if length == 0:
            return None
        if length > 0:
            data = self.read_bytes(length)
            return self._decode(data, 'latin-1').rstrip('\x00')
        data = self.read_bytes(-length * 2)
        return self._decode(data, 'utf-16-le').rstrip('\x00')

    def _decode(self, data: bytes, encoding: str) -> str:
        """
        解码文本

        Raises:
            InvalidFormatError: 文本无法按给定编码解码
        """
        try:
            return data.decode(encoding)
        except UnicodeDecodeError as e:
            source = self._name or "<内存>"
            raise InvalidFormatError(
                f"偏移 {self._position - len(data)} 处的文本无法按 {encoding} 解码 ({source}): {e.reason}"
            ) from e

    # ==================== 复合类型读取 ====================

    def read_guid(self) -> uuid.UUID:
        """读取 16 字节 GUID (混合字节序，与 .NET Guid 一致)"""
        return uuid.UUID(bytes_le=self.read_bytes(16))

    def read_filetime(self) -> datetime:
        """读取 FILETIME 并转换为 UTC datetime"""
        return filetime_to_datetime(self.read_i64())

    # ==================== 位置控制 ====================

    def skip(self, size: int):
        """跳过指定字节"""
        self.read_bytes(size)
