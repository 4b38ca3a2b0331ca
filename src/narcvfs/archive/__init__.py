#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
NARC 归档模型

提供归档的解码和编码。
"""

from .narc import Narc

__all__ = [
    "Narc",
]
