"""日志配置模块

日志缓存本身的诊断信息（编码失败、快照读写失败等）统一通过 loguru 输出。
库代码只使用 `from loguru import logger`，由应用决定是否调用 setup_logging。
"""

import sys

from loguru import logger

from log_cache.config import get_settings

# 日志格式
CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_logging(level: str | None = None, colorize: bool = True) -> int:
    """初始化诊断日志输出

    Args:
        level: 日志级别，默认使用 settings.LOG_LEVEL（DEBUG 模式下为 DEBUG）
        colorize: 是否彩色输出

    Returns:
        新增 sink 的 id
    """
    settings = get_settings()
    log_level = level or ("DEBUG" if settings.DEBUG else settings.LOG_LEVEL)

    logger.remove()
    sink_id = logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=log_level,
        colorize=colorize,
    )
    logger.debug(f"日志初始化完成: level={log_level}")
    return sink_id
