#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
NARC 数据结构定义

定义格式常量以及 NarcHeader、SectionHeader、AllocationEntry 等固定结构。
字节序在运行时才确定，因此这里的结构直接通过读写器序列化，
而不是使用固定前缀的 struct 格式。
"""

from dataclasses import dataclass
from typing import ClassVar

from .binary_io import BinaryReader, BinaryWriter, ByteOrder
from ..exceptions import InvalidFormatError


# ==================== 常量定义 ====================

NARC_MAGIC = 'NARC'

# 区块标签
TAG_ALLOCATION_TABLE = 'BTAF'
TAG_NAME_TABLE = 'BTNF'
TAG_FILE_IMAGE = 'GMIF'

# 默认值
DEFAULT_VERSION = 1
DEFAULT_HEADER_LENGTH = 16
DEFAULT_SECTION_COUNT = 3
DEFAULT_NAME_TABLE_UNKNOWN = 0x0001000000000008

# 对齐
NAME_TABLE_ALIGNMENT = 32
NAME_TABLE_RESERVED = 8
FILE_ALIGNMENT = 16


# ==================== 文件头 ====================

@dataclass
class NarcHeader:
    """
    文件头 (16 bytes)

    [magic: 4s][bom: 2][version: u16][total_length: u32]
    [header_length: u16][section_count: u16]
    """
    SIZE: ClassVar[int] = 16

    byte_order: ByteOrder = ByteOrder.LITTLE
    version: int = DEFAULT_VERSION
    total_length: int = 0
    header_length: int = DEFAULT_HEADER_LENGTH
    section_count: int = DEFAULT_SECTION_COUNT

    def write(self, writer: BinaryWriter) -> int:
        """
        写入文件头，同时把写入器切换到本文件头的字节序

        Returns:
            total_length 字段的位置 (用于最后回写)
        """
        writer.write_tag(NARC_MAGIC)
        writer.byte_order = self.byte_order
        writer.write_bytes(self.byte_order.bom)
        writer.write_u16(self.version)
        length_pos = writer.reserve(4)
        writer.write_u16(self.header_length)
        writer.write_u16(self.section_count)
        return length_pos

    @classmethod
    def read(cls, reader: BinaryReader) -> 'NarcHeader':
        """
        读取文件头 (魔法数之后的部分)，并切换读取器字节序

        Raises:
            ValueError: BOM 无效
        """
        byte_order = ByteOrder.from_bom(reader.read_bytes(2))
        reader.byte_order = byte_order
        return cls(
            byte_order=byte_order,
            version=reader.read_u16(),
            total_length=reader.read_u32(),
            header_length=reader.read_u16(),
            section_count=reader.read_u16(),
        )


# ==================== 区块头 ====================

@dataclass
class SectionHeader:
    """
    区块头 (8 bytes)

    length 包含区块头自身的 8 字节。
    """
    SIZE: ClassVar[int] = 8

    tag: str
    length: int = 0

    @classmethod
    def read(cls, reader: BinaryReader) -> 'SectionHeader':
        """
        Raises:
            InvalidFormatError: 声明的长度小于区块头本身
        """
        tag = reader.read_tag().upper()
        length = reader.read_u32()
        if length < cls.SIZE:
            raise InvalidFormatError(
                f"区块 {tag!r} 长度无效", expected=f">= {cls.SIZE}", actual=str(length)
            )
        return cls(tag=tag, length=length)

    def write(self, writer: BinaryWriter) -> int:
        """写入标签和长度占位符，返回区块起始位置"""
        start = writer.position
        writer.write_tag(self.tag)
        writer.reserve(4)
        return start

    @staticmethod
    def patch_length(writer: BinaryWriter, start: int) -> int:
        """在区块结束处回写长度 (当前位置 - 起始位置)"""
        length = writer.position - start
        writer.patch_u32(start + 4, length)
        return length


# ==================== 分配表条目 ====================

@dataclass
class AllocationEntry:
    """
    分配表条目 (8 bytes)

    偏移相对于 GMIF 区块头之后的第一个字节。
    """
    SIZE: ClassVar[int] = 8

    start: int = 0
    end: int = 0

    @property
    def size(self) -> int:
        return self.end - self.start

    @classmethod
    def read(cls, reader: BinaryReader) -> 'AllocationEntry':
        start, end = reader.read_struct('II')
        return cls(start=start, end=end)
