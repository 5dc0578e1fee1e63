"""
日志设置

基于 loguru：控制台简化格式输出，可选文件输出（按大小轮转、定期清理、压缩归档）。
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(level: str = "INFO",
                  log_file: Optional[str] = None,
                  colorize: bool = True,
                  rotation: str = "10 MB",
                  retention: str = "30 days") -> None:
    """
    设置日志系统

    Args:
        level: 控制台日志级别
        log_file: 日志文件路径，为空时不写文件
        colorize: 控制台是否彩色输出
        rotation: 文件轮转条件
        retention: 文件保留时长
    """
    # 移除默认处理器
    logger.remove()

    logger.add(
        sys.stderr,
        level=level.upper(),
        format=CONSOLE_FORMAT,
        colorize=colorize
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level="DEBUG",
            format=FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            compression="zip"
        )


def loguru_reporter(level: str, message: str) -> None:
    """默认的 (level, message) 日志接收器"""
    logger.opt(depth=1).log(level.upper(), message)
