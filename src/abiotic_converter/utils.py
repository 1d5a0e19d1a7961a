#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
工具函数

提供路径处理、时间戳转换等通用功能。
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Tuple


# FILETIME 纪元 (1601-01-01 UTC)
FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)


def normalize_path(path: str) -> str:
    """
    路径规范化

    1. 反斜杠统一为正斜杠
    2. 合并连续斜杠
    3. 移除首尾斜杠

    Examples:
        >>> normalize_path("Profile\\\\Worlds\\\\Cascade")
        'Profile/Worlds/Cascade'
        >>> normalize_path("/Profile//Worlds/")
        'Profile/Worlds'
    """
    path = path.replace("\\", "/")

    while "//" in path:
        path = path.replace("//", "/")

    return path.strip("/")


def strip_path_prefix(path: str, prefix: str) -> Tuple[str, bool]:
    """
    去除虚拟路径开头的目录前缀 (不区分大小写)

    若路径不以前缀开头，但包含 "/<前缀>" 段，则取该段之后的部分。

    Args:
        path: 虚拟路径
        prefix: 目录前缀，如 "Profile/"

    Returns:
        (去除前缀后的路径, 是否找到前缀)

    Examples:
        >>> strip_path_prefix("Profile/Worlds/A/WorldSave", "Profile/")
        ('Worlds/A/WorldSave', True)
        >>> strip_path_prefix("Worlds/A/WorldSave", "Profile/")
        ('Worlds/A/WorldSave', False)
    """
    normalized = normalize_path(path)
    prefix = normalize_path(prefix) + "/"
    lowered = normalized.lower()

    if lowered.startswith(prefix.lower()):
        return normalized[len(prefix):], True

    marker = "/" + prefix.lower()
    index = lowered.find(marker)
    if index >= 0:
        return normalized[index + len(marker):], True

    return normalized, False


def is_safe_relative_path(path: str) -> bool:
    """检查相对路径不会逃出目标目录 (无 .. 段、非绝对路径、无盘符)"""
    if not path or os.path.isabs(path) or ":" in path:
        return False
    return all(part not in ("", ".", "..") for part in normalize_path(path).split("/"))


def filetime_to_datetime(filetime: int) -> datetime:
    """
    FILETIME 转 UTC datetime

    Args:
        filetime: 1601-01-01 起的 100ns 计数
    """
    return FILETIME_EPOCH + timedelta(microseconds=filetime // 10)


def datetime_to_filetime(value: datetime) -> int:
    """UTC datetime 转 FILETIME (无时区的 datetime 视为 UTC)"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - FILETIME_EPOCH
    return (delta.days * 86400 + delta.seconds) * 10_000_000 + delta.microseconds * 10
