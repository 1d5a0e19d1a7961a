#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
异常定义

所有异常均继承自 ConverterError，便于统一捕获。
解析类异常只中止当前容器的转换；WrongApplicationError 与
NoWorldSaveFoundError 会中止整个转换流程。
"""

from typing import List, Optional


class ConverterError(Exception):
    """转换器基础异常"""
    pass


class SaveIOError(ConverterError):
    """
    I/O 异常

    文件缺失、无法访问或读取时数据不足 (截断) 时抛出。
    """
    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{message}: {path}"
        super().__init__(message)


class InvalidFormatError(ConverterError):
    """
    文件格式无效异常

    当文件结构不符合预期时抛出。
    """
    def __init__(self, message: str, expected: str = None, actual: str = None):
        self.expected = expected
        self.actual = actual
        if expected is not None and actual is not None:
            message = f"{message}: 期望 {expected}, 实际 {actual}"
        super().__init__(message)


class BadMagicError(InvalidFormatError):
    """标记字符串 (魔法值) 不匹配"""
    pass


class MalformedIndexError(InvalidFormatError):
    """containers.index 内容无法按预期拆分或解析"""
    pass


class UnsupportedVersionError(ConverterError):
    """
    版本不支持异常

    容器文件或存档格式的版本号不在支持列表中时抛出。
    """
    def __init__(self, file_version: int, supported_versions: List[int], path: str = None):
        self.file_version = file_version
        self.supported_versions = supported_versions
        self.path = path
        message = (
            f"不支持的版本 {file_version}, "
            f"支持的版本: {supported_versions}"
        )
        if path:
            message = f"{message} ({path})"
        super().__init__(message)


class DecompressionFailedError(ConverterError):
    """
    解压失败异常

    解压算法报错，或输出长度与声明的解压大小不一致时抛出。
    """
    def __init__(self, message: str, expected_size: int = None, actual_size: int = None):
        self.expected_size = expected_size
        self.actual_size = actual_size
        if expected_size is not None and actual_size is not None:
            message = f"{message}: 期望 {expected_size} 字节, 实际 {actual_size} 字节"
        super().__init__(message)


class WrongApplicationError(ConverterError):
    """输入目录中的存档不属于目标游戏"""
    def __init__(self, app_name: str, expected: str):
        self.app_name = app_name
        self.expected = expected
        super().__init__(
            f"输入位置的存档属于 '{app_name}', 期望 '{expected}'"
        )


class NoWorldSaveFoundError(ConverterError):
    """输入目录中没有任何世界存档容器"""
    def __init__(self, message: str = None):
        super().__init__(message or "输入位置中找不到世界存档")


class IntegrityMismatchError(ConverterError):
    """
    数据完整性异常

    条目声明的大小之和与解压后的数据长度不一致时抛出。
    已写出的文件不会回滚，部分结果保存在 result 属性中。
    """
    def __init__(self, expected: int, actual: int, result=None, message: str = None):
        self.expected = expected
        self.actual = actual
        self.result = result
        super().__init__(
            f"{message or '条目大小与数据长度不一致'}: "
            f"期望 {expected} 字节, 实际 {actual} 字节"
        )


class OodleNotFoundError(ConverterError):
    """Oodle 动态库未找到或无法加载"""
    pass
