#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
区块编解码

NARC 由三个区块组成，按标签分派:
- BTAF: 分配表，每个文件一对 (start, end) 偏移
- BTNF: 文件名表，长度前缀字符串，零长度结尾
- GMIF: 原始数据块，每个文件按 16 字节对齐

所有区块都是按位置对应的: 第 i 个名字、第 i 个分配条目、
第 i 段数据属于同一个文件。
"""

import logging
from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Type

from .binary_io import BinaryReader, BinaryWriter
from .schema import (
    AllocationEntry, SectionHeader,
    TAG_ALLOCATION_TABLE, TAG_NAME_TABLE, TAG_FILE_IMAGE,
    DEFAULT_NAME_TABLE_UNKNOWN, NAME_TABLE_ALIGNMENT, NAME_TABLE_RESERVED,
    FILE_ALIGNMENT,
)
from ..exceptions import InvalidFormatError

logger = logging.getLogger(__name__)


@dataclass
class AllocationTable:
    """
    分配表 (BTAF)

    格式: [file_count: u32][start: u32, end: u32] * file_count
    """
    TAG: ClassVar[str] = TAG_ALLOCATION_TABLE

    entries: List[AllocationEntry] = field(default_factory=list)

    @classmethod
    def read(cls, reader: BinaryReader, header: SectionHeader) -> 'AllocationTable':
        count = reader.read_u32()
        entries = [AllocationEntry.read(reader) for _ in range(count)]
        logger.debug("BTAF: %d 个分配条目", count)
        return cls(entries=entries)

    @classmethod
    def write(cls, writer: BinaryWriter, file_count: int) -> int:
        """
        写入分配表，条目全部以零占位

        实际偏移要等写 GMIF 时才知道，由 FileImage.write 回写。

        Returns:
            第一个条目的位置
        """
        start = SectionHeader(cls.TAG).write(writer)
        writer.write_u32(file_count)
        first_entry = writer.reserve(AllocationEntry.SIZE * file_count)
        SectionHeader.patch_length(writer, start)
        return first_entry


@dataclass
class NameTable:
    """
    文件名表 (BTNF)

    格式: [unknown: u64][len: u8][name]...[0x00][对齐到 32][8 保留字节]

    unknown 是真实文件中根目录的目录表条目，这里不解析，
    原样保留以便重新编码。
    """
    TAG: ClassVar[str] = TAG_NAME_TABLE

    unknown: int = DEFAULT_NAME_TABLE_UNKNOWN
    names: List[str] = field(default_factory=list)

    @classmethod
    def read(cls, reader: BinaryReader, header: SectionHeader) -> 'NameTable':
        end = reader.position - SectionHeader.SIZE + header.length
        unknown = reader.read_u64()
        names = []
        while reader.position < end:
            length = reader.read_u8()
            if length == 0:
                break
            names.append(reader.read_bytes(length).decode('ascii'))
        logger.debug("BTNF: %d 个文件名", len(names))
        return cls(unknown=unknown, names=names)

    def write(self, writer: BinaryWriter) -> None:
        # unknown 有意写在 BTNF 区块头之后 (有的写出器把它放在区块头之前)，
        # 与真实文件的布局一致，解码后才能原样写回
        start = SectionHeader(self.TAG).write(writer)
        writer.write_u64(self.unknown)
        for name in self.names:
            writer.write_string(name)
        writer.write_u8(0)
        writer.align(NAME_TABLE_ALIGNMENT)
        # 保留字节不写入，依赖目标流此处为空
        writer.skip(NAME_TABLE_RESERVED)
        SectionHeader.patch_length(writer, start)


@dataclass
class FileImage:
    """
    原始数据块 (GMIF)

    读取时先保存整个负载，等所有区块读完后再按分配表切片，
    这样区块在文件中的先后顺序不影响解码。
    """
    TAG: ClassVar[str] = TAG_FILE_IMAGE

    payload: bytes = b''

    @classmethod
    def read(cls, reader: BinaryReader, header: SectionHeader) -> 'FileImage':
        payload = reader.read_bytes(header.length - SectionHeader.SIZE)
        logger.debug("GMIF: 负载 %d 字节", len(payload))
        return cls(payload=payload)

    def slice(self, allocation: AllocationTable) -> List[bytes]:
        """
        按分配表把负载切成各个文件

        Raises:
            InvalidFormatError: 条目越界或 start > end
        """
        result = []
        for index, entry in enumerate(allocation.entries):
            if entry.start > entry.end or entry.end > len(self.payload):
                raise InvalidFormatError(
                    f"分配条目 {index} 越界",
                    expected=f"0 <= start <= end <= {len(self.payload)}",
                    actual=f"start={entry.start}, end={entry.end}"
                )
            result.append(self.payload[entry.start:entry.end])
        return result

    @classmethod
    def write(cls, writer: BinaryWriter, files: List[bytes], first_entry: int) -> None:
        """
        写入数据块，并回写分配表中每个文件的 start/end

        Args:
            writer: 二进制写入器
            files: 按顺序排列的文件内容
            first_entry: 分配表第一个条目的位置
        """
        start = SectionHeader(cls.TAG).write(writer)
        payload_start = writer.position
        entry_pos = first_entry

        for data in files:
            writer.patch_u32(entry_pos, writer.position - payload_start)
            writer.write_bytes(data)
            writer.patch_u32(entry_pos + 4, writer.position - payload_start)
            writer.align(FILE_ALIGNMENT)
            entry_pos += AllocationEntry.SIZE

        SectionHeader.patch_length(writer, start)
        logger.debug("GMIF: 写入 %d 个文件", len(files))


# 标签 -> 区块类型
SECTION_TYPES: Dict[str, Type] = {
    cls.TAG: cls for cls in (AllocationTable, NameTable, FileImage)
}
