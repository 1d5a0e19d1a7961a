#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Xbox 容器读取器

一个容器代表一组相关的存档文件，位于索引目录下以 GUID 命名的子目录中：

    <索引目录>/<GUID>/container.<sub_index>    容器文件 (文件条目列表)
    <索引目录>/<GUID>/<数据文件 GUID>           实际数据
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List

from ..core.binary_io import BinaryReader, BinaryWriter
from ..core.schema import ContainerHeader, ContainerFileEntry, CONTAINER_VERSION
from ..exceptions import SaveIOError, UnsupportedVersionError, InvalidFormatError

log = logging.getLogger(__name__)


@dataclass
class Container:
    """
    Xbox 存档容器

    由 ContainerHeader 定位，文件条目从容器文件中加载。
    """
    header: ContainerHeader
    directory_name: str
    files: List[ContainerFileEntry] = field(default_factory=list)

    @classmethod
    def load(cls, header: ContainerHeader, index_directory: str) -> 'Container':
        """
        加载容器文件

        Args:
            header: 来自 containers.index 的容器头
            index_directory: containers.index 所在目录

        Returns:
            加载完成的容器

        Raises:
            SaveIOError: 容器文件缺失或被截断
            UnsupportedVersionError: 容器版本不受支持
        """
        directory_name = header.directory_name
        container_path = os.path.join(index_directory, directory_name, header.file_name)

        try:
            file = open(container_path, 'rb')
        except OSError as e:
            raise SaveIOError(f"无法打开容器文件 ({e.strerror})", container_path) from e

        with file:
            reader = BinaryReader(file, container_path)

            version = reader.read_i32()
            if version != CONTAINER_VERSION:
                raise UnsupportedVersionError(version, [CONTAINER_VERSION], container_path)

            count = reader.read_i32()
            if count < 0:
                raise InvalidFormatError("容器文件条目数无效", expected=">= 0", actual=str(count))
            files = [ContainerFileEntry.read(reader) for _ in range(count)]

        log.debug("已加载容器 %s: %d 个文件", header.name, len(files))
        return cls(header=header, directory_name=directory_name, files=files)

    def save(self, index_directory: str) -> str:
        """
        写出容器文件

        Returns:
            容器文件路径
        """
        directory = os.path.join(index_directory, self.directory_name)
        os.makedirs(directory, exist_ok=True)
        container_path = os.path.join(directory, self.header.file_name)

        with open(container_path, 'wb') as f:
            writer = BinaryWriter(f)
            writer.write_i32(CONTAINER_VERSION)
            writer.write_i32(len(self.files))
            for entry in self.files:
                entry.write(writer)

        return container_path

    def data_file_path(self, index_directory: str, file_index: int = 0) -> str:
        """
        获取文件条目对应数据文件的完整路径

        Raises:
            InvalidFormatError: 容器中没有该文件条目
        """
        if file_index >= len(self.files):
            raise InvalidFormatError(
                f"容器 '{self.header.name}' 中没有第 {file_index} 个文件条目",
                expected=f"> {file_index}",
                actual=str(len(self.files))
            )
        return os.path.join(
            index_directory, self.directory_name, self.files[file_index].data_file_name
        )

    def __str__(self) -> str:
        return str(self.header)
