"""
日志缓存命令行入口
"""

import sys

from log_cache.cli import main

if __name__ == "__main__":
    sys.exit(main())
