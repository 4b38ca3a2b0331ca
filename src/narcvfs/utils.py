#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
narcvfs 工具函数

提供虚拟路径处理等通用功能。
虚拟路径只认 '/' 作为分隔符，不解析 '.' 和 '..'，大小写敏感。
"""

from typing import List, Tuple


def normalize_path(path: str) -> str:
    """
    路径规范化

    1. 去除首尾空白
    2. 合并连续斜杠
    3. 移除开头和末尾斜杠

    Args:
        path: 原始路径

    Returns:
        规范化后的路径，根目录为空字符串

    Examples:
        >>> normalize_path("/a//b/c.bin/")
        'a/b/c.bin'
        >>> normalize_path("/")
        ''
    """
    return '/'.join(split_path(path))


def split_path(path: str) -> List[str]:
    """
    拆分路径为段列表 (忽略空段)

    Examples:
        >>> split_path("a/b/c.bin")
        ['a', 'b', 'c.bin']
        >>> split_path("")
        []
    """
    return [segment for segment in path.strip().split('/') if segment]


def split_parent(path: str) -> Tuple[str, str]:
    """
    拆分为 (父目录路径, 最后一段)

    Examples:
        >>> split_parent("a/b/c.bin")
        ('a/b', 'c.bin')
        >>> split_parent("c.bin")
        ('', 'c.bin')
    """
    segments = split_path(path)
    if not segments:
        return '', ''
    return '/'.join(segments[:-1]), segments[-1]


def join_path(*parts: str) -> str:
    """
    拼接虚拟路径，空部分会被忽略

    Examples:
        >>> join_path("a", "", "b/c")
        'a/b/c'
    """
    return normalize_path('/'.join(parts))
