#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
narcvfs - NARC 归档编解码与虚拟文件系统

Narc 负责归档与字节流之间的转换，
NarcFileSystem 在解码后的目录树上提供按路径的增删查。
"""

__version__ = "0.1.0"

# 异常类
from .exceptions import NarcError, InvalidFormatError

# 工具函数
from .utils import normalize_path, split_path, join_path

# 字节流
from .core import ByteOrder, BinaryReader, BinaryWriter

# 归档与文件系统
from .archive import Narc
from .vfs import NarcFileSystem

# 格式转换
from .converter import NarcJsonConverter

__all__ = [
    # 版本
    "__version__",
    # 异常
    "NarcError",
    "InvalidFormatError",
    # 工具
    "normalize_path",
    "split_path",
    "join_path",
    # 字节流
    "ByteOrder",
    "BinaryReader",
    "BinaryWriter",
    # 归档
    "Narc",
    "NarcFileSystem",
    # 格式转换
    "NarcJsonConverter",
]
