#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
二进制 I/O 封装

提供 BinaryWriter 和 BinaryReader 类，封装所有底层流操作，
使上层模块不需要直接操作文件指针。

与普通的固定 Little-Endian 读写不同，NARC 的字节序由文件头的
BOM 决定，因此读写器的字节序可以在运行中切换。
"""

import struct
from contextlib import contextmanager
from enum import Enum
from typing import BinaryIO, Tuple, Any, Iterator, Optional


class ByteOrder(Enum):
    """字节序 (值为 struct 格式前缀)"""
    LITTLE = '<'
    BIG = '>'

    @property
    def bom(self) -> bytes:
        """按该字节序写出的 BOM (0xFFFE)"""
        return struct.pack(self.value + 'H', 0xFFFE)

    @classmethod
    def from_bom(cls, data: bytes) -> 'ByteOrder':
        """
        根据 BOM 字节判断字节序

        Raises:
            ValueError: 不是合法的 BOM
        """
        for order in cls:
            if order.bom == data:
                return order
        raise ValueError(f"无效的 BOM: {data.hex()}")


class _BinaryStream:
    """读写器公共部分: 字节序与位置控制"""

    def __init__(self, stream: BinaryIO, byte_order: ByteOrder = ByteOrder.LITTLE):
        self._stream = stream
        self._byte_order = byte_order

    @property
    def stream(self) -> BinaryIO:
        return self._stream

    @property
    def byte_order(self) -> ByteOrder:
        """当前字节序，影响之后所有多字节整数读写"""
        return self._byte_order

    @byte_order.setter
    def byte_order(self, value: ByteOrder):
        self._byte_order = value

    @property
    def position(self) -> int:
        """当前位置"""
        return self._stream.tell()

    def seek(self, position: int):
        """
        移动到指定位置

        Args:
            position: 目标位置
        """
        self._stream.seek(position)

    def skip(self, size: int):
        """
        跳过指定字节 (不读不写)

        Args:
            size: 要跳过的字节数
        """
        self.seek(self.position + size)

    @contextmanager
    def temporary_seek(self, position: Optional[int] = None) -> Iterator[int]:
        """
        临时移动位置，退出时 (包括异常) 恢复原位置

        Args:
            position: 目标位置，None 表示停留在当前位置

        Yields:
            进入前的原位置
        """
        origin = self.position
        if position is not None:
            self.seek(position)
        try:
            yield origin
        finally:
            self.seek(origin)

    def _fmt(self, fmt: str) -> str:
        return self._byte_order.value + fmt


class BinaryWriter(_BinaryStream):
    """
    二进制写入器

    封装所有底层写操作，提供类型化的写入方法。
    上层模块只需调用 write_u32() 等方法，无需关心 struct.pack 细节。
    """

    # ==================== 原始写入 ====================

    def write_bytes(self, data: bytes) -> int:
        """
        写入原始字节

        Args:
            data: 要写入的字节

        Returns:
            写入的字节数
        """
        return self._stream.write(data)

    def write_struct(self, fmt: str, *values: Any) -> int:
        """
        按 struct 格式写入 (自动加上当前字节序前缀)

        Args:
            fmt: 不含字节序前缀的 struct 格式字符串
            *values: 要写入的值

        Returns:
            写入的字节数
        """
        return self.write_bytes(struct.pack(self._fmt(fmt), *values))

    # ==================== 类型化写入 ====================

    def write_u8(self, value: int) -> int:
        """写入无符号 8 位整数"""
        return self.write_struct('B', value)

    def write_u16(self, value: int) -> int:
        """写入无符号 16 位整数"""
        return self.write_struct('H', value)

    def write_u32(self, value: int) -> int:
        """写入无符号 32 位整数"""
        return self.write_struct('I', value)

    def write_u64(self, value: int) -> int:
        """写入无符号 64 位整数"""
        return self.write_struct('Q', value)

    # ==================== 字符串写入 ====================

    def write_string(self, s: str) -> int:
        """
        写入长度前缀字符串

        格式: [长度: u8][ASCII 字节]

        Args:
            s: 要写入的字符串

        Returns:
            写入的总字节数 (1 + 字符串字节数)

        Raises:
            ValueError: 字符串超过 255 字节或含非 ASCII 字符
        """
        encoded = s.encode('ascii')
        if len(encoded) > 0xFF:
            raise ValueError(f"字符串过长 ({len(encoded)} > 255): {s!r}")
        self.write_u8(len(encoded))
        return 1 + self.write_bytes(encoded)

    def write_tag(self, tag: str) -> int:
        """写入 4 字节 ASCII 标签"""
        encoded = tag.encode('ascii')
        if len(encoded) != 4:
            raise ValueError(f"标签必须为 4 字节: {tag!r}")
        return self.write_bytes(encoded)

    # ==================== 填充与对齐 ====================

    def write_fill(self, count: int, value: int = 0) -> int:
        """
        写入 count 个相同的填充字节

        Args:
            count: 字节数
            value: 填充值 (0-255)
        """
        return self.write_bytes(bytes([value]) * count)

    def align(self, alignment: int) -> int:
        """
        以零字节填充到 alignment 的下一个整数倍 (绝对位置)

        Returns:
            填充的字节数
        """
        remainder = self.position % alignment
        if remainder == 0:
            return 0
        return self.write_fill(alignment - remainder)

    def reserve(self, size: int) -> int:
        """
        预留空间 (写入零字节)

        用于预留长度、偏移等稍后回写的字段。

        Args:
            size: 预留字节数

        Returns:
            预留区域的起始位置
        """
        start = self.position
        self.write_fill(size)
        return start

    # ==================== 回写 ====================

    @property
    def length(self) -> int:
        """流的总长度"""
        with self.temporary_seek():
            return self._stream.seek(0, 2)

    def patch_u32(self, position: int, value: int):
        """在指定位置回写 u32 值，写入后恢复到原位置"""
        with self.temporary_seek(position):
            self.write_u32(value)


class BinaryReader(_BinaryStream):
    """
    二进制读取器

    封装所有底层读操作，提供类型化的读取方法。
    """

    # ==================== 原始读取 ====================

    def read_bytes(self, size: int) -> bytes:
        """
        读取指定字节数

        Args:
            size: 要读取的字节数

        Returns:
            读取的字节

        Raises:
            EOFError: 流不足请求的字节数
        """
        data = self._stream.read(size)
        if len(data) < size:
            raise EOFError(
                f"流结束: 期望读取 {size} 字节，实际只有 {len(data)} 字节"
            )
        return data

    def read_struct(self, fmt: str) -> Tuple[Any, ...]:
        """
        按 struct 格式读取 (自动加上当前字节序前缀)

        Args:
            fmt: 不含字节序前缀的 struct 格式字符串

        Returns:
            解包后的值元组
        """
        full_fmt = self._fmt(fmt)
        data = self.read_bytes(struct.calcsize(full_fmt))
        return struct.unpack(full_fmt, data)

    # ==================== 类型化读取 ====================

    def read_u8(self) -> int:
        """读取无符号 8 位整数"""
        return self.read_struct('B')[0]

    def read_u16(self) -> int:
        """读取无符号 16 位整数"""
        return self.read_struct('H')[0]

    def read_u32(self) -> int:
        """读取无符号 32 位整数"""
        return self.read_struct('I')[0]

    def read_u64(self) -> int:
        """读取无符号 64 位整数"""
        return self.read_struct('Q')[0]

    # ==================== 字符串读取 ====================

    def read_string(self) -> str:
        """
        读取长度前缀字符串

        格式: [长度: u8][ASCII 字节]

        Returns:
            解码后的字符串
        """
        length = self.read_u8()
        return self.read_bytes(length).decode('ascii')

    def read_tag(self) -> str:
        """读取 4 字节 ASCII 标签"""
        return self.read_bytes(4).decode('ascii', errors='replace')

    def peek_bytes(self, size: int) -> bytes:
        """
        预览指定字节 (不移动位置)

        Args:
            size: 要预览的字节数

        Returns:
            预览的字节
        """
        with self.temporary_seek():
            return self.read_bytes(size)
