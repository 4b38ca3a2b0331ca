#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
NARC 虚拟文件系统

在归档目录树上提供按路径的文件操作。
"""

from .filesystem import NarcFileSystem

__all__ = [
    "NarcFileSystem",
]
