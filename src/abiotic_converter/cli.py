#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
命令行入口

Examples:
  abiotic-converter --find
  abiotic-converter --profile 9A3F21 --out ./SaveGames
  abiotic-converter --in ./wgs/000900000A1B2C3D_0000000000000000000000007B483EAA --out ./SaveGames
  abiotic-converter --create-header ./Steam/WorldSave_Facility.sav
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .converter import convert_profile, list_world_saves
from .exceptions import ConverterError, WrongApplicationError, NoWorldSaveFoundError
from .hooks.oodle import OodleHook
from .locations import get_xbox_save_folder, iter_profile_dirs, profile_directory_name, pad_profile_id
from .template import load_template_header, create_template_header

log = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

# --in 模式下的输出用户目录名
DEFAULT_PROFILE_FOLDER = "Profile"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='abiotic-converter',
        description='将 Abiotic Factor 的 Microsoft Store 存档转换为 Steam 格式',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='Examples:' + __doc__.split('Examples:', 1)[1]
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument('--in', dest='input', metavar='PATH',
                      help='包含 containers.index 的存档目录')
    mode.add_argument('--find', action='store_true',
                      help='列出本机 Microsoft Store 存档中的用户与世界')
    mode.add_argument('--profile', metavar='ID',
                      help='按用户 ID 转换本机 Microsoft Store 存档')
    mode.add_argument('--create-header', metavar='SAV',
                      help='从 Steam 存档生成模板头部')
    mode.add_argument('--version', action='store_true',
                      help='显示版本号')

    parser.add_argument('--out', metavar='PATH',
                        help='输出根目录 (--in / --profile 必需)')
    parser.add_argument('--header', metavar='PATH',
                        help='模板头部文件 (默认读取 ABIOTIC_SAVE_HEADER 或内置文件)')
    parser.add_argument('--oodle', metavar='PATH',
                        help='Oodle 动态库路径 (默认读取 ABIOTIC_OODLE_PATH 或自动查找)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='输出调试信息')
    return parser


def find_profiles() -> int:
    """列出本机全部用户目录中的世界存档"""
    save_folder = get_xbox_save_folder()
    if not save_folder.is_dir():
        log.error("找不到 Microsoft Store 存档目录: %s", save_folder)
        return 1

    found = False
    for profile_id, directory in iter_profile_dirs(save_folder):
        try:
            worlds = list_world_saves(str(directory))
        except ConverterError as e:
            log.warning("跳过用户目录 %s: %s", directory.name, e)
            continue

        found = True
        log.info("用户 %s (%s)", profile_id, directory)
        for world in worlds:
            log.info("    %s  (%s)", world.name, world.timestamp.strftime('%Y-%m-%d %H:%M:%S'))

    if not found:
        log.error("没有找到包含 Abiotic Factor 存档的用户目录")
        return 1
    return 0


def convert(input_directory: str, output_root: str, profile_folder: str,
            header_path: Optional[str], oodle_path: Optional[str]) -> int:
    """执行转换并返回退出码"""
    try:
        template_header = load_template_header(header_path)
        hook = OodleHook(library_path=oodle_path)
        result = convert_profile(input_directory, output_root, profile_folder, template_header, hook)
    except (WrongApplicationError, NoWorldSaveFoundError) as e:
        log.error("无法转换: %s", e)
        return 1
    except ConverterError as e:
        log.error("转换中止: %s", e)
        return 1

    if not result.success:
        log.error(
            "部分世界转换失败 (%d/%d): %s",
            result.failed_count, result.total_count,
            ", ".join(name for name, _ in result.failed)
        )
        return 1

    log.info("已转换 %d 个世界到 %s", result.success_count, result.output_directory)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT
    )

    if args.version:
        print(f"abiotic-converter {__version__}")
        return 0

    if args.create_header:
        try:
            create_template_header(args.create_header, args.header)
        except ConverterError as e:
            log.error("无法生成模板头部: %s", e)
            return 1
        return 0

    if args.find:
        return find_profiles()

    if not args.out:
        parser.error('--in / --profile 需要同时指定 --out')

    if args.input:
        return convert(args.input, args.out, DEFAULT_PROFILE_FOLDER, args.header, args.oodle)

    input_directory = str(get_xbox_save_folder() / profile_directory_name(args.profile))
    return convert(input_directory, args.out, pad_profile_id(args.profile), args.header, args.oodle)


if __name__ == '__main__':
    sys.exit(main())
