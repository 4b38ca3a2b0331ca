#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
NARC 归档模型

Narc 在内存中保存整个归档: 字节序、版本号，以及按插入顺序排列的
文件名 -> 内容映射。磁盘上的偏移由这个顺序决定，所以解码再编码后
顺序保持不变。
"""

import io
import logging
from typing import BinaryIO, Dict, Iterator, Optional

from ..core.binary_io import BinaryReader, BinaryWriter, ByteOrder
from ..core.schema import (
    NarcHeader, SectionHeader,
    NARC_MAGIC, DEFAULT_VERSION, DEFAULT_HEADER_LENGTH, DEFAULT_SECTION_COUNT,
    DEFAULT_NAME_TABLE_UNKNOWN,
)
from ..core.sections import AllocationTable, NameTable, FileImage, SECTION_TYPES
from ..core.tree import BranchNode, LeafNode
from ..exceptions import InvalidFormatError
from ..utils import split_path

logger = logging.getLogger(__name__)


class Narc:
    """
    NARC 归档

    用法:
        >>> narc = Narc.open("a012.narc")
        >>> narc["map.bin"] = b"..."
        >>> narc.save("a012_new.narc")

    files 是权威数据；root 是第一次访问时由 files 构建的目录树，
    文件系统层修改树之后，通过 sync_from_tree() 写回 files。
    通过映射接口增删文件会同步修改已构建的树。
    """

    def __init__(
        self,
        files: Optional[Dict[str, bytes]] = None,
        byte_order: ByteOrder = ByteOrder.LITTLE,
        version: int = DEFAULT_VERSION
    ):
        """
        初始化归档

        Args:
            files: 初始文件映射 (会被复制)
            byte_order: 字节序
            version: 格式版本号
        """
        self.byte_order = byte_order
        self.version = version
        self.files: Dict[str, bytes] = dict(files or {})

        # 解码时记录，编码时原样写回
        self.header_length = DEFAULT_HEADER_LENGTH
        self.section_count = DEFAULT_SECTION_COUNT
        self.name_table_unknown = DEFAULT_NAME_TABLE_UNKNOWN

        self._root: Optional[BranchNode] = None

    # ==================== 解码 ====================

    @classmethod
    def read(cls, stream: BinaryIO, leave_open: bool = True) -> 'Narc':
        """
        从流中解码

        Args:
            stream: 可 seek 的二进制流，从当前位置开始读取
            leave_open: False 时无论成功与否都会关闭流

        Raises:
            InvalidFormatError: 魔法数或 BOM 无效
            EOFError: 流被截断
        """
        try:
            return cls._decode(BinaryReader(stream))
        finally:
            if not leave_open:
                stream.close()

    @classmethod
    def _decode(cls, reader: BinaryReader) -> 'Narc':
        magic = reader.read_bytes(4).decode('ascii', errors='replace')
        if magic.upper() != NARC_MAGIC:
            raise InvalidFormatError(
                "不是 NARC 文件", expected=NARC_MAGIC, actual=repr(magic)
            )

        try:
            header = NarcHeader.read(reader)
        except ValueError as e:
            raise InvalidFormatError(f"无效的字节序标记: {e}") from e

        sections = {}
        for _ in range(header.section_count):
            with reader.temporary_seek():
                section_header = SectionHeader.read(reader)
                section_type = SECTION_TYPES.get(section_header.tag)
                if section_type is None:
                    logger.debug(
                        "跳过未知区块 %r (%d 字节)",
                        section_header.tag, section_header.length
                    )
                else:
                    sections[section_header.tag] = section_type.read(reader, section_header)
            reader.skip(section_header.length)

        allocation = sections.get(AllocationTable.TAG, AllocationTable())
        name_table = sections.get(NameTable.TAG, NameTable())
        image = sections.get(FileImage.TAG, FileImage())
        blobs = image.slice(allocation)

        names = list(name_table.names)
        if len(names) != len(blobs):
            logger.warning(
                "文件名数量 (%d) 与分配条目数量 (%d) 不一致",
                len(names), len(blobs)
            )
        # 没有名字的文件以序号命名
        names.extend(str(i) for i in range(len(names), len(blobs)))

        narc = cls(byte_order=header.byte_order, version=header.version)
        narc.header_length = header.header_length
        narc.section_count = header.section_count
        narc.name_table_unknown = name_table.unknown
        for name, data in zip(names, blobs):
            if name in narc.files:
                logger.warning("重复的文件名 %r，后者覆盖前者", name)
            narc.files[name] = data

        logger.debug("解码完成: %d 个文件", len(narc.files))
        return narc

    @classmethod
    def from_bytes(cls, data: bytes) -> 'Narc':
        """从字节解码"""
        return cls.read(io.BytesIO(data))

    @classmethod
    def open(cls, path: str) -> 'Narc':
        """从文件路径解码"""
        with open(path, 'rb') as f:
            return cls.read(f)

    # ==================== 编码 ====================

    def write(self, stream: BinaryIO, leave_open: bool = True) -> None:
        """
        编码到流

        区块顺序固定为 BTAF → BTNF → GMIF。
        目标流应为空 (BTNF 的保留字节不会显式写入)。

        Args:
            stream: 可 seek 的二进制流
            leave_open: False 时无论成功与否都会关闭流
        """
        try:
            self._encode(BinaryWriter(stream))
        finally:
            if not leave_open:
                stream.close()

    def _encode(self, writer: BinaryWriter) -> None:
        header = NarcHeader(
            byte_order=self.byte_order,
            version=self.version,
            header_length=self.header_length,
            section_count=DEFAULT_SECTION_COUNT,
        )
        length_pos = header.write(writer)

        first_entry = AllocationTable.write(writer, len(self.files))
        NameTable(unknown=self.name_table_unknown, names=list(self.files)).write(writer)
        FileImage.write(writer, list(self.files.values()), first_entry)

        total_length = writer.length
        writer.patch_u32(length_pos, total_length)
        logger.debug("编码完成: %d 个文件, %d 字节", len(self.files), total_length)

    def to_bytes(self) -> bytes:
        """编码为字节"""
        buffer = io.BytesIO()
        self.write(buffer)
        return buffer.getvalue()

    def save(self, path: str) -> None:
        """编码并写入文件路径"""
        with open(path, 'wb') as f:
            self.write(f)

    # ==================== 目录树 ====================

    @property
    def root(self) -> BranchNode:
        """由 files 构建的目录树根节点 (惰性构建，之后保持同一对象)"""
        if self._root is None:
            self._root = self._build_tree()
        return self._root

    def _build_tree(self) -> BranchNode:
        root = BranchNode()
        for name, data in self.files.items():
            self._place_leaf(root, name, data)
        return root

    @staticmethod
    def _place_leaf(root: BranchNode, name: str, data: bytes) -> LeafNode:
        segments = split_path(name)
        current = root
        for segment in segments[:-1]:
            child = current.get_child(segment)
            if child is None:
                child = current.add_child(BranchNode(segment))
            if not isinstance(child, BranchNode):
                current = None
                break
            current = child

        if current is None or not segments or current.get_child(segments[-1]) is not None:
            # 名字与已有节点冲突，原样挂在根目录下，保证数据不丢
            logger.warning("无法把 %r 放入目录树，作为根目录文件保留", name)
            return root.add_child(LeafNode(name, data))
        return current.add_child(LeafNode(segments[-1], data))

    def find_leaf(self, name: str) -> Optional[LeafNode]:
        """
        在目录树中查找文件节点

        先按路径查找，找不到时再查找以完整名字挂在根目录下的冲突文件。
        """
        leaf = self.root.find_child_by_path(name, LeafNode)
        if leaf is None:
            leaf = self.root.get_child(name)
        return leaf if isinstance(leaf, LeafNode) else None

    def sync_from_tree(self, root: Optional[BranchNode] = None) -> None:
        """
        用目录树重建 files

        深度优先、按子节点顺序遍历，名字以 '/' 连接。
        空目录无法在 NARC 中表示，会被忽略。

        Args:
            root: 目录树根节点，默认为 self.root
        """
        if root is None:
            root = self.root
        files: Dict[str, bytes] = {}

        def walk(branch: BranchNode, prefix: str):
            for node in branch:
                path = f"{prefix}/{node.name}" if prefix else node.name
                if isinstance(node, LeafNode):
                    files[path] = node.contents
                else:
                    walk(node, path)

        walk(root, '')
        self.files = files
        self._root = root

    # ==================== 映射接口 ====================

    def __getitem__(self, name: str) -> bytes:
        return self.files[name]

    def __setitem__(self, name: str, data: bytes):
        self.files[name] = data
        if self._root is not None:
            leaf = self.find_leaf(name)
            if leaf is None:
                self._place_leaf(self._root, name, data)
            else:
                leaf.contents = data

    def __delitem__(self, name: str):
        del self.files[name]
        if self._root is not None:
            leaf = self.find_leaf(name)
            if leaf is not None and leaf.parent is not None:
                leaf.parent.remove_child(leaf)

    def __contains__(self, name: object) -> bool:
        return name in self.files

    def __iter__(self) -> Iterator[str]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)

    def __repr__(self) -> str:
        return (
            f"Narc(files={len(self.files)}, byte_order={self.byte_order.name}, "
            f"version={self.version})"
        )
