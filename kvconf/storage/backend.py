"""
持久化后端

配置存储只依赖两个操作：按行读取、按行写入。
文件后端写入时先写临时文件再替换，写入失败不会破坏原文件。
"""

import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence

from loguru import logger


class PersistenceBackend(Protocol):
    """持久化后端接口"""

    def read_lines(self, path: str) -> List[str]:
        """读取全部行，无法打开时抛出 OSError"""
        ...

    def write_lines(self, path: str, lines: Sequence[str]) -> None:
        """写入全部行，失败时抛出 OSError"""
        ...


class FileBackend:
    """本地文件后端（UTF-8）"""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def read_lines(self, path: str) -> List[str]:
        # 只按 \n、\r\n、\r 分行，值中的 \x0c、\u2028 等字符保持原样
        with open(path, 'r', encoding=self.encoding) as f:
            return [line.rstrip('\n') for line in f]

    def write_lines(self, path: str, lines: Sequence[str]) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp",
                                        dir=str(target.parent))
        try:
            with os.fdopen(fd, 'w', encoding=self.encoding, newline='\n') as f:
                for line in lines:
                    f.write(line)
                    f.write('\n')
            os.replace(tmp_path, target)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                logger.debug(f"清理临时文件失败: {tmp_path}")
            raise

        logger.debug(f"写入配置文件: {target} ({len(lines)} 行)")


class MemoryBackend:
    """内存后端，按路径保存行列表"""

    def __init__(self, files: Optional[Dict[str, List[str]]] = None):
        self.files: Dict[str, List[str]] = {
            path: list(lines) for path, lines in (files or {}).items()
        }

    def read_lines(self, path: str) -> List[str]:
        if path not in self.files:
            raise FileNotFoundError(path)
        return list(self.files[path])

    def write_lines(self, path: str, lines: Sequence[str]) -> None:
        self.files[path] = list(lines)

    def exists(self, path: str) -> bool:
        return path in self.files
