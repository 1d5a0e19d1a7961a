#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
模板头部测试

测试模板头部的读取、截取和生成。
"""

import os
from unittest.mock import patch

import pytest

from abiotic_converter.exceptions import (
    BadMagicError,
    InvalidFormatError,
    SaveIOError,
    UnsupportedVersionError,
)
from abiotic_converter.template import (
    ENV_VAR,
    DEFAULT_HEADER_PATH,
    resolve_template_path,
    load_template_header,
    extract_template_header,
    create_template_header,
)

from conftest import build_gvas_header, fstring_bytes, WORLD_CLASS


def steam_save(header: bytes) -> bytes:
    """模板头部 + 存档类 + 任意内容"""
    return header + fstring_bytes(WORLD_CLASS) + b"\x01\x02\x03\x04body"


class TestResolvePath:
    """模板路径优先级"""

    def test_explicit_path_first(self, tmp_path):
        with patch.dict(os.environ, {ENV_VAR: "/from/env"}):
            assert resolve_template_path(str(tmp_path / "explicit.dat")) == str(tmp_path / "explicit.dat")

    def test_env_var(self):
        with patch.dict(os.environ, {ENV_VAR: "/from/env"}):
            assert resolve_template_path() == "/from/env"

    def test_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert resolve_template_path() == str(DEFAULT_HEADER_PATH)


class TestLoadTemplateHeader:
    """load_template_header"""

    def test_load(self, template_header_file, template_header):
        assert load_template_header(str(template_header_file)) == template_header

    def test_load_from_env(self, template_header_file, template_header):
        with patch.dict(os.environ, {ENV_VAR: str(template_header_file)}):
            assert load_template_header() == template_header

    def test_missing(self, tmp_path):
        with pytest.raises(SaveIOError):
            load_template_header(str(tmp_path / "missing.dat"))

    def test_empty(self, tmp_path):
        path = tmp_path / "empty.dat"
        path.write_bytes(b"")
        with pytest.raises(InvalidFormatError):
            load_template_header(str(path))


class TestExtractTemplateHeader:
    """extract_template_header"""

    @pytest.mark.parametrize("custom_format", [1, 2, 3])
    def test_custom_version_formats(self, custom_format):
        header = build_gvas_header(custom_format=custom_format, custom_versions=3)
        assert extract_template_header(steam_save(header)) == header

    def test_old_save_game_version(self):
        header = build_gvas_header(save_game_version=2)
        assert extract_template_header(steam_save(header)) == header

    def test_no_custom_versions(self):
        header = build_gvas_header(custom_versions=0)
        assert extract_template_header(steam_save(header)) == header

    def test_bad_magic(self):
        with pytest.raises(BadMagicError):
            extract_template_header(b"XXXX" + build_gvas_header()[4:])

    def test_unknown_custom_format(self):
        header = build_gvas_header(custom_format=9, custom_versions=1)
        with pytest.raises(UnsupportedVersionError) as exc_info:
            extract_template_header(steam_save(header))
        assert exc_info.value.file_version == 9

    def test_truncated(self):
        with pytest.raises(SaveIOError):
            extract_template_header(build_gvas_header()[:20])


class TestCreateTemplateHeader:
    """create_template_header"""

    def test_create(self, tmp_path, template_header):
        source = tmp_path / "WorldSave_Facility.sav"
        source.write_bytes(steam_save(template_header))
        output = tmp_path / "nested" / "SaveHeader.dat"

        result = create_template_header(str(source), str(output))

        assert result == str(output)
        assert output.read_bytes() == template_header
        assert load_template_header(result) == template_header

    def test_missing_source(self, tmp_path):
        with pytest.raises(SaveIOError):
            create_template_header(str(tmp_path / "missing.sav"), str(tmp_path / "out.dat"))
