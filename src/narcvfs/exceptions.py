#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
narcvfs 异常定义

所有异常均继承自 NarcError，便于统一捕获。
"""


class NarcError(Exception):
    """narcvfs 基础异常"""
    pass


class InvalidFormatError(NarcError):
    """
    文件格式无效异常

    当魔法数或 BOM 不符合预期，或分配表指向数据区之外时抛出。
    解码过程中一旦抛出，不会返回任何半成品归档。
    """
    def __init__(self, message: str, expected: str = None, actual: str = None):
        self.expected = expected
        self.actual = actual
        if expected and actual:
            message = f"{message}: 期望 {expected}, 实际 {actual}"
        super().__init__(message)
