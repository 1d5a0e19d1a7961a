#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
外部动态库发现模块

提供统一的 Oodle 动态库定位策略。
"""

import ctypes.util
import os
import sys
from pathlib import Path
from typing import Optional, Dict, List


class OodleLibraryLocator:
    """
    Oodle 动态库定位器

    按优先级搜索：
    1. 显式指定路径
    2. 环境变量 ABIOTIC_OODLE_PATH
    3. 系统库搜索 (ctypes.util.find_library)
    4. 库安装目录下的 vendor/lib/
    5. 用户数据目录 ~/.abiotic_converter/lib/
    6. 当前工作目录
    """

    ENV_VAR = 'ABIOTIC_OODLE_PATH'

    # 按平台列出已知文件名，新版本优先
    LIBRARY_NAMES: Dict[str, List[str]] = {
        'win32': [
            'oo2core_9_win64.dll',
            'oo2core_8_win64.dll',
            'oo2core_7_win64.dll',
            'oo2core_6_win64.dll',
            'oo2core_5_win64.dll',
        ],
        'darwin': [
            'liboo2coremac64.2.9.dylib',
            'liboo2coremac64.dylib',
        ],
        'linux': [
            'liboo2corelinux64.so.9',
            'liboo2corelinux64.so.8',
            'liboo2corelinux64.so',
        ],
    }

    # find_library 使用的库名
    SYSTEM_NAMES = ['oo2core_9_win64', 'oo2corelinux64', 'oo2coremac64']

    _cache: Dict[str, Optional[str]] = {}

    @classmethod
    def clear_cache(cls) -> None:
        """清空路径缓存"""
        cls._cache.clear()

    @classmethod
    def library_names(cls) -> List[str]:
        """当前平台的候选文件名"""
        for prefix, names in cls.LIBRARY_NAMES.items():
            if sys.platform.startswith(prefix):
                return list(names)
        return [name for names in cls.LIBRARY_NAMES.values() for name in names]

    @classmethod
    def find_library(
        cls,
        explicit_path: Optional[str] = None,
        use_cache: bool = True
    ) -> Optional[str]:
        """
        按优先级搜索 Oodle 动态库

        Args:
            explicit_path: 显式指定的路径 (最高优先级)
            use_cache: 是否使用缓存

        Returns:
            动态库路径 (或 find_library 返回的库名)，未找到返回 None
        """
        cache_key = explicit_path or ''

        if use_cache and cache_key in cls._cache:
            return cls._cache[cache_key]

        result = cls._find_library_impl(explicit_path)

        if use_cache:
            cls._cache[cache_key] = result

        return result

    @classmethod
    def _find_library_impl(cls, explicit_path: Optional[str] = None) -> Optional[str]:
        """实际的搜索实现"""

        # 1. 显式指定路径
        if explicit_path and cls._is_valid_library(explicit_path):
            return explicit_path

        # 2. 环境变量
        env_path = os.environ.get(cls.ENV_VAR)
        if env_path and cls._is_valid_library(env_path):
            return env_path

        # 3. 系统库搜索
        for name in cls.SYSTEM_NAMES:
            system_path = ctypes.util.find_library(name)
            if system_path:
                return system_path

        # 4-6. 固定目录
        for directory in (cls.get_package_vendor_path(), cls.get_user_data_path(), Path.cwd()):
            found = cls._find_in_directory(directory)
            if found:
                return found

        return None

    @classmethod
    def _is_valid_library(cls, path: str) -> bool:
        p = Path(path)
        return p.exists() and p.is_file()

    @classmethod
    def _find_in_directory(cls, directory: Path) -> Optional[str]:
        """在指定目录中查找动态库"""
        if not directory.is_dir():
            return None

        for name in cls.library_names():
            path = directory / name
            if path.is_file():
                return str(path)

        return None

    @classmethod
    def get_package_vendor_path(cls) -> Path:
        """
        获取库 vendor/lib 目录

        返回 abiotic_converter 包目录下的 vendor/lib 路径。
        """
        return Path(__file__).parent.parent / 'vendor' / 'lib'

    @classmethod
    def get_user_data_path(cls) -> Path:
        """获取用户数据目录 ~/.abiotic_converter/lib/"""
        return Path.home() / '.abiotic_converter' / 'lib'
