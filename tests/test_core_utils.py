#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Utils 模块测试

测试虚拟路径处理函数。
"""

import pytest

from narcvfs.utils import (
    normalize_path,
    split_path,
    split_parent,
    join_path,
)


# ==================== normalize_path 测试 ====================

class TestNormalizePath:
    """normalize_path 测试"""

    @pytest.mark.parametrize("input_path,expected", [
        # 基础路径
        ("maps/town.bin", "maps/town.bin"),

        # 去除前后斜杠
        ("/maps/town/", "maps/town"),
        ("/maps", "maps"),

        # 多余斜杠
        ("maps//town///a.bin", "maps/town/a.bin"),

        # 首尾空白
        ("  maps/a.bin  ", "maps/a.bin"),

        # 根目录
        ("", ""),
        ("/", ""),
        ("///", ""),

        # 不解析 . 和 ..，大小写敏感
        ("a/./b/../C", "a/./b/../C"),
    ])
    def test_normalize(self, input_path, expected):
        assert normalize_path(input_path) == expected

    def test_backslash_not_separator(self):
        """反斜杠是普通字符"""
        assert normalize_path("a\\b") == "a\\b"


# ==================== split_path 测试 ====================

class TestSplitPath:
    """split_path 测试"""

    @pytest.mark.parametrize("input_path,expected", [
        ("a/b/c.bin", ["a", "b", "c.bin"]),
        ("/a//b/", ["a", "b"]),
        ("c.bin", ["c.bin"]),
        ("", []),
        ("/", []),
    ])
    def test_split(self, input_path, expected):
        assert split_path(input_path) == expected


# ==================== split_parent 测试 ====================

class TestSplitParent:
    """split_parent 测试"""

    @pytest.mark.parametrize("input_path,expected", [
        ("a/b/c.bin", ("a/b", "c.bin")),
        ("/a/c.bin/", ("a", "c.bin")),
        ("c.bin", ("", "c.bin")),
        ("", ("", "")),
    ])
    def test_split_parent(self, input_path, expected):
        assert split_parent(input_path) == expected


# ==================== join_path 测试 ====================

class TestJoinPath:
    """join_path 测试"""

    @pytest.mark.parametrize("parts,expected", [
        (("a", "b"), "a/b"),
        (("", "b"), "b"),
        (("a", "", "b/c"), "a/b/c"),
        (("/mnt/", "/x.bin"), "mnt/x.bin"),
        (("", ""), ""),
    ])
    def test_join(self, parts, expected):
        assert join_path(*parts) == expected
