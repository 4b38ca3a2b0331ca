#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
格式转换工具

把 NARC 归档的结构导出为 JSON，便于查看和比对。

JSON 格式:
{
    "magic": "NARC",
    "byte_order": "little",
    "version": 1,
    "name_table_unknown": 281474976710664,
    "entry_count": 2,
    "entries": [
        {"name": "a.bin", "size": 4, "start": 0, "end": 4, "md5": "..."},
        ...
    ]
}

start/end 是按当前内容重新编码后的分配表偏移，
与原文件一致的前提是文件内容和顺序未被修改。
"""

import hashlib
import io
import json
from typing import Any, Dict

from .archive.narc import Narc
from .core.binary_io import BinaryReader
from .core.schema import NARC_MAGIC, NarcHeader, SectionHeader
from .core.sections import AllocationTable


class NarcJsonConverter:
    """NARC 到 JSON 的导出"""

    @staticmethod
    def to_dict(narc: Narc) -> Dict[str, Any]:
        """
        导出为字典

        Args:
            narc: 归档对象

        Returns:
            可直接 json.dump 的字典
        """
        encoded = narc.to_bytes()
        allocation = NarcJsonConverter._read_allocation(encoded, narc)

        entries = []
        for (name, data), alloc in zip(narc.files.items(), allocation.entries):
            entries.append({
                'name': name,
                'size': len(data),
                'start': alloc.start,
                'end': alloc.end,
                'md5': hashlib.md5(data).hexdigest(),
            })

        return {
            'magic': NARC_MAGIC,
            'byte_order': narc.byte_order.name.lower(),
            'version': narc.version,
            'name_table_unknown': narc.name_table_unknown,
            'entry_count': len(entries),
            'entries': entries,
        }

    @staticmethod
    def _read_allocation(encoded: bytes, narc: Narc) -> AllocationTable:
        # 编码器总是把 BTAF 写在文件头之后
        reader = BinaryReader(io.BytesIO(encoded), narc.byte_order)
        reader.seek(NarcHeader.SIZE)
        header = SectionHeader.read(reader)
        return AllocationTable.read(reader, header)

    @staticmethod
    def narc_to_json(narc_path: str, output_path: str, indent: int = 2) -> None:
        """
        将 NARC 文件导出为 JSON 文件

        Args:
            narc_path: NARC 文件路径
            output_path: 输出 JSON 文件路径
            indent: JSON 缩进
        """
        data = NarcJsonConverter.to_dict(Narc.open(narc_path))
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=indent)
