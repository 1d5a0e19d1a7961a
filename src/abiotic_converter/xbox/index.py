#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Xbox 容器索引读取器

containers.index 列出一个用户 / 应用下的全部存档容器。

布局:
    [版本: i32 (14)][容器数: i32][保留: i32 (0)]
    [包标识: Xbox 字符串 "<包名>!<应用名>"]
    [创建时间: FILETIME]
    [保留: i32][GUID: Xbox 字符串]
    [保留: i32][保留: i32 (0)]
    [ContainerHeader * 容器数]
"""

import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .container import Container
from ..core.binary_io import BinaryReader, BinaryWriter
from ..core.schema import ContainerHeader, INDEX_VERSION
from ..exceptions import SaveIOError, MalformedIndexError
from ..utils import FILETIME_EPOCH

log = logging.getLogger(__name__)

# 索引文件名
INDEX_FILE_NAME = "containers.index"

# 包标识分隔符
PACKAGE_ID_SEPARATOR = "!"

# 世界存档容器名后缀 (备份以 "-WC-B" 结尾，不匹配)
WORLD_SAVE_SUFFIX = "-WC"


@dataclass
class ContainerIndex:
    """
    Xbox 存档容器索引

    表示某个游戏在一个用户下的全部存档容器。
    """
    package_name: str
    app_name: str
    timestamp: datetime = FILETIME_EPOCH
    guid: uuid.UUID = uuid.UUID(int=0)
    headers: List[ContainerHeader] = field(default_factory=list)
    version: int = INDEX_VERSION
    flags: int = 0
    unknown: int = 0
    directory: Optional[str] = field(default=None, repr=False, compare=False)

    @property
    def package_id(self) -> str:
        return f"{self.package_name}{PACKAGE_ID_SEPARATOR}{self.app_name}"

    @classmethod
    def load(cls, directory: str) -> 'ContainerIndex':
        """
        读取目录下的 containers.index

        Args:
            directory: 用户存档目录

        Raises:
            SaveIOError: 文件缺失或被截断
            MalformedIndexError: 包标识或 GUID 无法解析
        """
        index_path = os.path.join(directory, INDEX_FILE_NAME)

        try:
            file = open(index_path, 'rb')
        except OSError as e:
            raise SaveIOError(f"无法打开容器索引 ({e.strerror})", index_path) from e

        with file:
            reader = BinaryReader(file, index_path)

            version = reader.read_i32()
            count = reader.read_i32()
            reader.skip(4)  # 保留 0

            package_id = reader.read_xbox_string()
            parts = package_id.split(PACKAGE_ID_SEPARATOR)
            if len(parts) != 2:
                raise MalformedIndexError(
                    "无法拆分包标识",
                    expected="<包名>!<应用名>",
                    actual=repr(package_id)
                )
            package_name, app_name = parts

            timestamp = reader.read_filetime()
            flags = reader.read_i32()

            guid_text = reader.read_xbox_string()
            try:
                guid = uuid.UUID(guid_text)
            except ValueError:
                raise MalformedIndexError(f"无法解析索引 GUID: {guid_text!r}")

            unknown = reader.read_i32()
            reader.skip(4)  # 保留 0

            if count < 0:
                raise MalformedIndexError("容器数无效", expected=">= 0", actual=str(count))
            headers = [ContainerHeader.read(reader) for _ in range(count)]

        log.debug("已加载容器索引 %s: %d 个容器", package_id, len(headers))
        return cls(
            package_name=package_name,
            app_name=app_name,
            timestamp=timestamp,
            guid=guid,
            headers=headers,
            version=version,
            flags=flags,
            unknown=unknown,
            directory=directory
        )

    def save(self, directory: str) -> str:
        """
        写出 containers.index

        Returns:
            索引文件路径
        """
        os.makedirs(directory, exist_ok=True)
        index_path = os.path.join(directory, INDEX_FILE_NAME)

        with open(index_path, 'wb') as f:
            writer = BinaryWriter(f)
            writer.write_i32(self.version)
            writer.write_i32(len(self.headers))
            writer.write_i32(0)
            writer.write_xbox_string(self.package_id)
            writer.write_filetime(self.timestamp)
            writer.write_i32(self.flags)
            writer.write_xbox_string(str(self.guid))
            writer.write_i32(self.unknown)
            writer.write_i32(0)
            for header in self.headers:
                header.write(writer)

        return index_path

    def world_save_headers(self) -> List[ContainerHeader]:
        """所有世界存档容器头 (不含备份)"""
        return [h for h in self.headers if is_world_save(h)]

    def find_header(self, name: str) -> Optional[ContainerHeader]:
        """按主名称查找容器头"""
        for header in self.headers:
            if header.name == name:
                return header
        return None

    def load_container(self, header: ContainerHeader) -> Container:
        """加载容器头对应的容器 (相对于索引所在目录)"""
        if self.directory is None:
            raise SaveIOError("容器索引未关联目录，无法定位容器")
        return Container.load(header, self.directory)

    def __str__(self) -> str:
        return f"{self.guid} : {self.package_name} ({self.app_name})"


def is_world_save(header: ContainerHeader) -> bool:
    """容器是否为世界存档 (主名称以 -WC 结尾)"""
    return header.name.endswith(WORLD_SAVE_SUFFIX)


def world_name(header: ContainerHeader) -> str:
    """世界存档名 (去除 -WC 后缀)"""
    name = header.name
    if name.endswith(WORLD_SAVE_SUFFIX):
        return name[:-len(WORLD_SAVE_SUFFIX)]
    return name
