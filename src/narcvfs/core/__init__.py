#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
narcvfs 核心模块

提供二进制 I/O 封装、格式结构定义、区块编解码、目录树和批量操作工具。
"""

from .binary_io import ByteOrder, BinaryReader, BinaryWriter
from .schema import NarcHeader, SectionHeader, AllocationEntry
from .sections import AllocationTable, NameTable, FileImage, SECTION_TYPES
from .tree import Node, BranchNode, LeafNode
from .batch import (
    FileItem, ProgressInfo, BatchResult, ProgressTracker,
    ErrorPolicy, scan_directory, estimate_total_bytes
)

__all__ = [
    "ByteOrder",
    "BinaryReader",
    "BinaryWriter",
    "NarcHeader",
    "SectionHeader",
    "AllocationEntry",
    # 区块
    "AllocationTable",
    "NameTable",
    "FileImage",
    "SECTION_TYPES",
    # 目录树
    "Node",
    "BranchNode",
    "LeafNode",
    # 批量操作
    "FileItem",
    "ProgressInfo",
    "BatchResult",
    "ProgressTracker",
    "ErrorPolicy",
    "scan_directory",
    "estimate_total_bytes",
]
