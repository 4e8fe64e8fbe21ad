"""命令行入口

查看和清理日志缓存快照，支持 path, show, clear, print-config 命令。
"""

import argparse
import sys

import yaml
from loguru import logger

from log_cache.config import get_settings
from log_cache.domain.errors import PersistenceError, SnapshotNotFoundError
from log_cache.logging import setup_logging
from log_cache.storage import FileSnapshotStore
from log_cache.utils import json


def _make_store(file: str | None) -> FileSnapshotStore:
    return FileSnapshotStore(file) if file else FileSnapshotStore()


def cmd_path(store: FileSnapshotStore) -> int:
    """打印快照文件路径"""
    print(store.path)
    return 0


def cmd_show(store: FileSnapshotStore) -> int:
    """打印快照内容"""
    try:
        data = store.read()
    except SnapshotNotFoundError:
        logger.info(f"快照不存在: {store.path}")
        return 0
    except PersistenceError as e:
        logger.error(e.message)
        return 1

    try:
        records = json.loads(data)
    except ValueError as e:
        logger.error(f"快照不是合法的 JSON: {e}")
        return 1
    if not isinstance(records, list):
        logger.error(f"快照必须是 JSON 数组，实际为 {type(records).__name__}")
        return 1

    print(json.dumps(records, pretty=True))
    logger.info(f"共 {len(records)} 条日志: {store.path}")
    return 0


def cmd_clear(store: FileSnapshotStore) -> int:
    """删除快照"""
    existed = store.exists()
    try:
        store.delete()
    except PersistenceError as e:
        logger.error(e.message)
        return 1
    if existed:
        logger.info(f"快照已删除: {store.path}")
    else:
        logger.info(f"快照不存在: {store.path}")
    return 0


def cmd_print_config(config_format: str = "yaml") -> int:
    """打印当前配置"""
    settings = get_settings()
    data = settings.model_dump()
    data["cache_file"] = str(settings.cache_file)
    if config_format == "json":
        print(json.dumps(data, pretty=True))
    else:
        print(yaml.safe_dump(data, allow_unicode=True, sort_keys=False), end="")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="log-cache",
        description="日志缓存快照工具",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用方式:
  查看快照路径: log-cache path
  查看快照内容: log-cache show
  删除快照:     log-cache clear
  查看配置:     log-cache print-config --format json
        """,
    )
    parser.add_argument("--file", default=None, help="快照文件路径，默认使用配置中的路径")
    parser.add_argument("--debug", action="store_true", help="输出 DEBUG 级别日志")

    subparsers = parser.add_subparsers(dest="command", help="可用命令")
    subparsers.add_parser("path", help="打印快照文件路径")
    subparsers.add_parser("show", help="打印快照内容")
    subparsers.add_parser("clear", help="删除快照")

    config_parser = subparsers.add_parser("print-config", help="打印当前配置")
    config_parser.add_argument(
        "--format",
        default="yaml",
        choices=["yaml", "json"],
        help="输出格式 (yaml/json)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """主入口"""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level="DEBUG" if args.debug else None)

    if args.command == "print-config":
        return cmd_print_config(config_format=args.format)

    store = _make_store(args.file)
    if args.command == "path":
        return cmd_path(store)
    if args.command == "show":
        return cmd_show(store)
    if args.command == "clear":
        return cmd_clear(store)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
