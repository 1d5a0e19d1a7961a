#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Hook 基类定义

定义解压算法的抽象接口。归档数据使用的压缩算法由外部库提供，
读取器只通过该接口调用。
"""

from abc import ABC, abstractmethod


class CompressionHook(ABC):
    """
    压缩算法钩子

    用于接入外部块压缩算法 (如 Oodle)。
    """

    @property
    def name(self) -> str:
        """
        可读名称 (用于日志)

        默认返回类名，子类可覆盖提供更友好的名称。
        """
        return type(self).__name__

    @abstractmethod
    def decompress(self, data: bytes, raw_size: int) -> bytes:
        """
        解压数据

        Args:
            data: 压缩后的数据
            raw_size: 原始大小，用于预分配缓冲区

        Returns:
            解压后的数据，长度必须等于 raw_size
        """
        pass
