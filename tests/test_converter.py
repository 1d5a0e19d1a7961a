#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
转换流程测试

测试 list_world_saves 和 convert_profile。
"""

import io
import logging

import pytest

from abiotic_converter.converter import convert_profile, list_world_saves
from abiotic_converter.core.binary_io import BinaryWriter
from abiotic_converter.core.schema import ARCHIVE_MARKER
from abiotic_converter.exceptions import (
    WrongApplicationError,
    NoWorldSaveFoundError,
    SaveIOError,
    UnsupportedVersionError,
    InvalidFormatError,
)

from conftest import build_archive, WORLD_CLASS


def world_entries(world: str):
    return [
        (f"Profile/Worlds/{world}/WorldSave_Facility", WORLD_CLASS, f"{world}-facility".encode()),
        (f"Profile/Worlds/{world}/WorldSave_Office", WORLD_CLASS, f"{world}-office".encode()),
    ]


class TestListWorldSaves:
    """世界存档列表"""

    def test_lists_worlds_without_backups(self, make_profile):
        directory = make_profile({
            "Cascade-WC": b"a",
            "Cascade-WC-B": b"b",
            "Foundry-WC": b"c",
            "Player": b"d",
        })

        worlds = list_world_saves(str(directory))

        assert [w.name for w in worlds] == ["Cascade", "Foundry"]
        assert worlds[0].header.name == "Cascade-WC"

    def test_wrong_application(self, make_profile):
        directory = make_profile({"Cascade-WC": b"a"}, app_name="AppSomeOtherGame")
        with pytest.raises(WrongApplicationError) as exc_info:
            list_world_saves(str(directory))
        assert exc_info.value.app_name == "AppSomeOtherGame"


class TestConvertProfile:
    """convert_profile"""

    def test_converts_every_world(self, tmp_path, make_profile, template_header, zlib_compression_hook):
        directory = make_profile({
            "Cascade-WC": build_archive(world_entries("Cascade")),
            "Foundry-WC": build_archive(world_entries("Foundry")),
        })
        out = tmp_path / "out"

        result = convert_profile(str(directory), str(out), "Profile", template_header, zlib_compression_hook)

        assert result.success
        assert result.success_count == 2
        assert result.failed_count == 0
        assert result.total_files == 4
        for world in ("Cascade", "Foundry"):
            output = out / "Profile" / "Worlds" / world / "WorldSave_Facility.sav"
            assert output.read_bytes().startswith(template_header)
            assert output.read_bytes().endswith(f"{world}-facility".encode())

    def test_backups_are_ignored(self, tmp_path, make_profile, template_header, zlib_compression_hook):
        directory = make_profile({
            "Cascade-WC": build_archive(world_entries("Cascade")),
            "Cascade-WC-B": build_archive(world_entries("CascadeBackup")),
        })
        out = tmp_path / "out"

        result = convert_profile(str(directory), str(out), "Profile", template_header, zlib_compression_hook)

        assert [name for name, _ in result.converted] == ["Cascade"]
        assert not (out / "Profile" / "Worlds" / "CascadeBackup").exists()

    def test_logs_each_world(self, tmp_path, make_profile, template_header, zlib_compression_hook, caplog):
        directory = make_profile({"Cascade-WC": build_archive(world_entries("Cascade"))})

        with caplog.at_level(logging.INFO):
            convert_profile(str(directory), str(tmp_path / "out"), "Profile", template_header, zlib_compression_hook)

        assert "正在转换世界: Cascade" in caplog.text

    def test_wrong_application_writes_nothing(self, tmp_path, make_profile, template_header, zlib_compression_hook):
        directory = make_profile(
            {"Cascade-WC": build_archive(world_entries("Cascade"))},
            app_name="AppSomeOtherGame"
        )
        out = tmp_path / "out"

        with pytest.raises(WrongApplicationError):
            convert_profile(str(directory), str(out), "Profile", template_header, zlib_compression_hook)

        assert not out.exists()

    def test_no_world_saves(self, tmp_path, make_profile, template_header, zlib_compression_hook):
        directory = make_profile({"Cascade-WC-B": b"a", "Player": b"b"})
        out = tmp_path / "out"

        with pytest.raises(NoWorldSaveFoundError):
            convert_profile(str(directory), str(out), "Profile", template_header, zlib_compression_hook)

        assert not out.exists()

    def test_missing_index(self, tmp_path, template_header, zlib_compression_hook):
        with pytest.raises(SaveIOError):
            convert_profile(str(tmp_path), str(tmp_path / "out"), "Profile", template_header, zlib_compression_hook)

    def test_failed_world_does_not_stop_others(self, tmp_path, make_profile, template_header, zlib_compression_hook):
        directory = make_profile({
            "Broken-WC": b"not an archive",
            "Cascade-WC": build_archive(world_entries("Cascade")),
        })
        out = tmp_path / "out"

        result = convert_profile(str(directory), str(out), "Profile", template_header, zlib_compression_hook)

        assert not result.success
        assert [name for name, _ in result.failed] == ["Broken"]
        assert isinstance(result.failed[0][1], SaveIOError)
        assert [name for name, _ in result.converted] == ["Cascade"]
        assert (out / "Profile" / "Worlds" / "Cascade" / "WorldSave_Office.sav").is_file()

    def test_container_without_entries_fails(self, tmp_path, make_profile, template_header, zlib_compression_hook):
        directory = make_profile(
            {"Empty-WC": b"", "Cascade-WC": build_archive(world_entries("Cascade"))},
            empty=("Empty-WC",)
        )

        result = convert_profile(str(directory), str(tmp_path / "out"), "Profile", template_header, zlib_compression_hook)

        assert result.failed_count == 1
        assert isinstance(result.failed[0][1], InvalidFormatError)
        assert result.success_count == 1

    def test_unsupported_container_version(self, tmp_path, make_profile, template_header, zlib_compression_hook):
        directory = make_profile({"Cascade-WC": build_archive(world_entries("Cascade"))})
        container_file = next(directory.glob("*/container.1"))
        data = bytearray(container_file.read_bytes())
        data[0:4] = (5).to_bytes(4, "little")
        container_file.write_bytes(bytes(data))

        result = convert_profile(str(directory), str(tmp_path / "out"), "Profile", template_header, zlib_compression_hook)

        assert isinstance(result.failed[0][1], UnsupportedVersionError)

    def test_output_directory_is_recreated(self, tmp_path, make_profile, template_header, zlib_compression_hook):
        directory = make_profile({"Cascade-WC": build_archive(world_entries("Cascade"))})
        stale = tmp_path / "out" / "Profile" / "Worlds" / "Old" / "WorldSave_Old.sav"
        stale.parent.mkdir(parents=True)
        stale.write_bytes(b"old")
        sibling = tmp_path / "out" / "Other" / "keep.txt"
        sibling.parent.mkdir(parents=True)
        sibling.write_bytes(b"keep")

        convert_profile(str(directory), str(tmp_path / "out"), "Profile", template_header, zlib_compression_hook)

        assert not stale.exists()
        assert sibling.exists()

    def test_keep_existing_output(self, tmp_path, make_profile, template_header, zlib_compression_hook):
        directory = make_profile({"Cascade-WC": build_archive(world_entries("Cascade"))})
        existing = tmp_path / "out" / "Profile" / "notes.txt"
        existing.parent.mkdir(parents=True)
        existing.write_bytes(b"notes")

        convert_profile(
            str(directory), str(tmp_path / "out"), "Profile", template_header, zlib_compression_hook,
            clean_output=False
        )

        assert existing.exists()

    def test_sidecar_resolved_against_input(self, tmp_path, make_profile, template_header, zlib_compression_hook):
        entries = world_entries("Cascade") + [("Profile/Worlds/Cascade/SandboxSettings.ini", None, b"")]
        directory = make_profile({"Cascade-WC": build_archive(entries)})
        sidecar = directory / "Profile" / "Worlds" / "Cascade" / "SandboxSettings.ini"
        sidecar.parent.mkdir(parents=True)
        sidecar.write_text("[SandboxSettings]\n")
        out = tmp_path / "out"

        result = convert_profile(str(directory), str(out), "Profile", template_header, zlib_compression_hook)

        assert result.success
        assert (out / "Profile" / "Worlds" / "Cascade" / "SandboxSettings.ini").read_text() == "[SandboxSettings]\n"

    def test_undecodable_entry_path_fails_only_that_world(
            self, tmp_path, make_profile, template_header, zlib_compression_hook):
        bad_archive = io.BytesIO()
        writer = BinaryWriter(bad_archive)
        writer.write_fstring(ARCHIVE_MARKER)
        for value in (3, 0, 0, 1):
            writer.write_i32(value)
        writer.write_i32(-2)
        writer.write_bytes(b"\x00\xd8\x00\x00")
        directory = make_profile({
            "Bad-WC": bad_archive.getvalue(),
            "Cascade-WC": build_archive(world_entries("Cascade")),
        })
        out = tmp_path / "out"

        result = convert_profile(str(directory), str(out), "Profile", template_header, zlib_compression_hook)

        assert [name for name, _ in result.failed] == ["Bad"]
        assert isinstance(result.failed[0][1], InvalidFormatError)
        assert [name for name, _ in result.converted] == ["Cascade"]
        assert (out / "Profile" / "Worlds" / "Cascade" / "WorldSave_Facility.sav").is_file()

    def test_unusable_output_directory(self, tmp_path, make_profile, template_header, zlib_compression_hook):
        directory = make_profile({"Cascade-WC": build_archive(world_entries("Cascade"))})
        out = tmp_path / "out"
        out.write_bytes(b"not a directory")

        with pytest.raises(SaveIOError):
            convert_profile(str(directory), str(out), "Profile", template_header, zlib_compression_hook)
