#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
存档位置

Microsoft Store 版的存档位于:

    %LOCALAPPDATA%/Packages/<包名>/SystemAppData/wgs/<用户 ID>_<标题 ID>/

用户 ID 为 16 位十六进制 (左侧补 0)。
"""

import os
from pathlib import Path
from typing import Iterator, Optional, Tuple

# 游戏在 Microsoft Store 的包名
XBOX_PACKAGE_NAME = "PlayStack.AbioticFactor_3wcqaesafpzfy"

# 用户目录名后缀
PROFILE_DIRECTORY_SUFFIX = "_0000000000000000000000007B483EAA"

# 用户 ID 宽度
PROFILE_ID_WIDTH = 16


def get_xbox_save_folder(local_app_data: Optional[str] = None) -> Path:
    """
    获取 Microsoft Store 版存档根目录

    Args:
        local_app_data: LOCALAPPDATA 目录，默认读取环境变量
    """
    base = local_app_data or os.environ.get("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
    return Path(base) / "Packages" / XBOX_PACKAGE_NAME / "SystemAppData" / "wgs"


def pad_profile_id(profile_id: str) -> str:
    """左侧补 0 到 16 位"""
    return profile_id.rjust(PROFILE_ID_WIDTH, "0")


def profile_directory_name(profile_id: str) -> str:
    """用户 ID 对应的存档目录名"""
    return f"{pad_profile_id(profile_id)}{PROFILE_DIRECTORY_SUFFIX}"


def profile_id_from_directory(directory_name: str) -> str:
    """从存档目录名取出用户 ID (去除前导 0)"""
    return directory_name.split("_", 1)[0].lstrip("0")


def iter_profile_dirs(save_folder: Path) -> Iterator[Tuple[str, Path]]:
    """
    遍历存档根目录下的用户目录

    Yields:
        (用户 ID, 目录路径)
    """
    for entry in sorted(Path(save_folder).iterdir()):
        if entry.is_dir() and "_" in entry.name:
            yield profile_id_from_directory(entry.name), entry
