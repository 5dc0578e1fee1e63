"""
kvconf - 持久化键值配置存储

以 key=value 文本文件保存配置，支持类型化读写、默认值生成和整体校验。
"""

__version__ = "1.0.0"
