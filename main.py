#!/usr/bin/env python3
"""
kvconf - 键值配置文件管理工具

以 key=value 文本文件保存配置，支持类型化读写、默认值生成和整体校验
"""

import sys
from pathlib import Path

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from kvconf.cli import main

if __name__ == "__main__":
    main()
