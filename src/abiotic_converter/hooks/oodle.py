#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Oodle 解压 Hook

通过 ctypes 调用 Oodle 动态库 (oo2core) 的 OodleLZ_Decompress。
Oodle 为闭源库，需要从安装了 Unreal Engine 游戏的目录中取得，
并放置在可发现的路径 (见 OodleLibraryLocator)。
"""

import ctypes
from typing import Optional

from .base import CompressionHook
from .external import OodleLibraryLocator
from ..exceptions import OodleNotFoundError, DecompressionFailedError


# OodleLZ_FuzzSafe_Yes
FUZZ_SAFE = 1
# OodleLZ_CheckCRC_No
CHECK_CRC = 0
# OodleLZ_Verbosity_None
VERBOSITY = 0
# OodleLZ_Decode_ThreadPhaseAll
THREAD_PHASE_ALL = 3


class OodleHook(CompressionHook):
    """
    Oodle 解压 Hook

    Usage:
        hook = OodleHook()
        raw = hook.decompress(compressed, raw_size)
    """

    def __init__(self, library_path: Optional[str] = None, load_on_init: bool = True):
        """
        初始化 OodleHook

        Args:
            library_path: Oodle 动态库路径 (可选，自动查找)
            load_on_init: 是否在初始化时加载动态库
        """
        self._library_path = library_path or OodleLibraryLocator.find_library()
        self._decompress_func = None

        if load_on_init:
            self._load()

    @property
    def name(self) -> str:
        return "oodle"

    @property
    def library_path(self) -> Optional[str]:
        return self._library_path

    def _load(self) -> None:
        """加载动态库并声明 OodleLZ_Decompress 签名"""
        if self._decompress_func is not None:
            return

        if not self._library_path:
            raise OodleNotFoundError(
                "找不到 Oodle 动态库。请将 oo2core 放在可发现的路径，"
                f"或设置 {OodleLibraryLocator.ENV_VAR} 环境变量。"
            )

        try:
            library = ctypes.CDLL(self._library_path)
        except OSError as e:
            raise OodleNotFoundError(f"无法加载 Oodle 动态库 '{self._library_path}': {e}") from e

        func = library.OodleLZ_Decompress
        func.restype = ctypes.c_int64
        func.argtypes = [
            ctypes.c_void_p, ctypes.c_int64,  # 压缩数据, 大小
            ctypes.c_void_p, ctypes.c_int64,  # 输出缓冲区, 大小
            ctypes.c_int, ctypes.c_int, ctypes.c_int,  # fuzzSafe, checkCRC, verbosity
            ctypes.c_void_p, ctypes.c_int64,  # 解码缓冲区基址, 大小
            ctypes.c_void_p, ctypes.c_void_p,  # 回调, 回调参数
            ctypes.c_void_p, ctypes.c_int64,  # 解码器内存, 大小
            ctypes.c_int,  # 线程阶段
        ]
        self._decompress_func = func

    def decompress(self, data: bytes, raw_size: int) -> bytes:
        """
        解压 Oodle 数据

        Raises:
            OodleNotFoundError: 动态库不可用
            DecompressionFailedError: Oodle 返回错误
        """
        self._load()

        if raw_size == 0:
            return b''

        output = ctypes.create_string_buffer(raw_size)
        source = ctypes.create_string_buffer(bytes(data), len(data))

        result = self._decompress_func(
            source, len(data),
            output, raw_size,
            FUZZ_SAFE, CHECK_CRC, VERBOSITY,
            None, 0,
            None, None,
            None, 0,
            THREAD_PHASE_ALL
        )

        if result <= 0:
            raise DecompressionFailedError(f"OodleLZ_Decompress 返回 {result}")

        return output.raw[:result]
