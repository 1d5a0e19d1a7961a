#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
pytest 全局配置

提供共享 fixtures、自定义 markers 和测试工具。
"""

import io
import uuid
import zlib
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from abiotic_converter.archive import SaveClass
from abiotic_converter.converter import APP_NAME
from abiotic_converter.core.binary_io import BinaryWriter
from abiotic_converter.core.schema import (
    ArchiveHeader,
    ContainerFileEntry,
    ContainerHeader,
    ContainerId,
    FileEntry,
)
from abiotic_converter.hooks.base import CompressionHook
from abiotic_converter.hooks.external import OodleLibraryLocator
from abiotic_converter.locations import XBOX_PACKAGE_NAME
from abiotic_converter.xbox import Container, ContainerIndex


# ==================== 自定义 Markers ====================

def pytest_configure(config):
    """注册自定义 markers"""
    config.addinivalue_line("markers", "oodle: 需要 Oodle 动态库的测试")


# ==================== 外部库检测 ====================

OODLE_AVAILABLE = OodleLibraryLocator.find_library(use_cache=False) is not None


def pytest_collection_modifyitems(config, items):
    """自动跳过需要 Oodle 但环境不可用的测试"""
    skip_oodle = pytest.mark.skip(reason="Oodle 动态库不可用，跳过相关测试")

    for item in items:
        if "oodle" in item.keywords and not OODLE_AVAILABLE:
            item.add_marker(skip_oodle)


# ==================== 测试数据 ====================

# (虚拟路径, 存档类, 数据)
ArchiveEntry = Tuple[str, Optional[str], bytes]

WORLD_CLASS = SaveClass.WORLD.value
METADATA_CLASS = SaveClass.WORLD_METADATA.value
CHARACTER_CLASS = SaveClass.CHARACTER.value

SAMPLE_ENTRIES: List[ArchiveEntry] = [
    ("Profile/Worlds/Cascade/WorldSave_Facility", WORLD_CLASS, b"facility-data" * 8),
    ("Profile/Worlds/Cascade/WorldSave_MetaData", METADATA_CLASS, b"metadata"),
    ("Profile/Worlds/Cascade/PlayerData/Player_76561198000000000", CHARACTER_CLASS, b"\x00\x01\x02\x03"),
]


def fstring_bytes(s: str) -> bytes:
    """按 ASCII FString 编码 (测试中用于拼装期望值)"""
    encoded = s.encode("ascii") + b"\x00"
    return len(encoded).to_bytes(4, "little", signed=True) + encoded


def build_gvas_header(
    custom_format: int = 3,
    custom_versions: int = 2,
    save_game_version: int = 3
) -> bytes:
    """构造一段 Steam 存档模板头部"""
    buffer = io.BytesIO()
    writer = BinaryWriter(buffer)
    writer.write_bytes(b"GVAS")
    writer.write_i32(save_game_version)
    writer.write_i32(522)
    if save_game_version >= 3:
        writer.write_i32(1012)
    writer.write_u16(5)
    writer.write_u16(4)
    writer.write_u16(4)
    writer.write_u32(0)
    writer.write_fstring("++UE5+Release-5.4")
    writer.write_i32(custom_format)
    writer.write_i32(custom_versions)
    for i in range(custom_versions):
        if custom_format == 1:
            writer.write_u32(i)
            writer.write_i32(i)
        elif custom_format == 2:
            writer.write_guid(uuid.UUID(int=i + 1))
            writer.write_i32(i)
            writer.write_fstring(f"Version{i}")
        else:
            writer.write_guid(uuid.UUID(int=i + 1))
            writer.write_i32(i)
    return buffer.getvalue()


def build_archive(
    entries: List[ArchiveEntry],
    version: int = 3,
    decompressed_size: Optional[int] = None,
    compressed_data: Optional[bytes] = None
) -> bytes:
    """构造世界存档归档 (zlib 压缩)"""
    payload = b"".join(data for _, _, data in entries)
    header = ArchiveHeader(
        version=version,
        decompressed_size=len(payload) if decompressed_size is None else decompressed_size,
        entries=[FileEntry(path=path, size=len(data), save_class=cls) for path, cls, data in entries],
        compressed_data=zlib.compress(payload) if compressed_data is None else compressed_data
    )
    buffer = io.BytesIO()
    header.write(BinaryWriter(buffer))
    return buffer.getvalue()


# ==================== 基础 Fixtures ====================

@pytest.fixture
def template_header() -> bytes:
    """模板头部字节"""
    return build_gvas_header()


@pytest.fixture
def template_header_file(tmp_path, template_header) -> Path:
    """写入磁盘的模板头部"""
    path = tmp_path / "SaveHeader.dat"
    path.write_bytes(template_header)
    return path


@pytest.fixture
def sample_entries() -> List[ArchiveEntry]:
    return list(SAMPLE_ENTRIES)


# ==================== 压缩 Hook Fixture ====================

class ZlibHook(CompressionHook):
    """测试用 CompressionHook，以 zlib 代替 Oodle"""

    def decompress(self, data: bytes, raw_size: int) -> bytes:
        return zlib.decompress(data)


@pytest.fixture
def zlib_compression_hook():
    """zlib 解压 Hook"""
    return ZlibHook()


# ==================== 存档目录 Fixtures ====================

@pytest.fixture
def make_profile(tmp_path):
    """
    创建 Microsoft Store 用户存档目录的工厂

    Usage:
        profile_dir = make_profile({"Cascade-WC": build_archive(entries)})

    Args (工厂):
        containers: 容器名 -> 数据文件内容
        app_name: 索引中的应用名
        directory: 目标目录，默认 tmp_path / "wgs_profile"
        empty: 这些容器名只写容器文件，不含文件条目

    Returns:
        用户目录路径
    """
    def factory(
        containers: Dict[str, bytes],
        app_name: str = APP_NAME,
        directory: Optional[Path] = None,
        empty: Tuple[str, ...] = ()
    ) -> Path:
        directory = Path(directory or tmp_path / "wgs_profile")
        headers = []

        for i, (name, data) in enumerate(containers.items()):
            header = ContainerHeader(
                container_id=ContainerId(name=name, secondary_name=name, tag=0x8DC0000 + i),
                sub_index=1,
                guid=uuid.uuid4(),
                size=len(data)
            )
            files = []
            if name not in empty:
                data_guid = uuid.uuid4()
                files.append(ContainerFileEntry(metadata="Data", guid=uuid.uuid4(), data_guid=data_guid))

            container = Container(header=header, directory_name=header.directory_name, files=files)
            container.save(str(directory))
            for entry in files:
                (directory / header.directory_name / entry.data_file_name).write_bytes(data)

            headers.append(header)

        index = ContainerIndex(
            package_name=XBOX_PACKAGE_NAME,
            app_name=app_name,
            guid=uuid.uuid4(),
            headers=headers
        )
        index.save(str(directory))
        return directory

    return factory
