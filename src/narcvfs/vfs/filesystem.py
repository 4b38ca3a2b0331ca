#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
NARC 虚拟文件系统

在 Narc 的目录树上提供按路径增删查和列举的操作。

路径以 '/' 分隔，首尾斜杠和空路径都表示根目录，
不解析 '.' 和 '..'，大小写敏感。

找不到路径时不抛异常，而是按各操作的约定返回
空字节、False、None 或空序列。
"""

import logging
import os
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from ..archive.narc import Narc
from ..core.batch import (
    BatchResult, ErrorPolicy, FileItem, ProgressInfo, ProgressTracker,
    estimate_total_bytes, scan_directory,
)
from ..core.tree import BranchNode, LeafNode, Node
from ..utils import join_path, normalize_path, split_parent, split_path

logger = logging.getLogger(__name__)


class NarcFileSystem:
    """
    NARC 虚拟文件系统

    用法:
        >>> fs = NarcFileSystem(Narc.open("a012.narc"))
        >>> fs.add_file("maps/town.bin", data)
        >>> fs.to_narc().save("a012_new.narc")
    """

    def __init__(self, narc: Optional[Narc] = None):
        """
        Args:
            narc: 要包装的归档，默认新建一个空归档
        """
        self._narc = narc if narc is not None else Narc()

    @property
    def root(self) -> BranchNode:
        """归档当前的目录树，每次都从归档取，不在这里缓存"""
        return self._narc.root

    # ==================== 内部查找 ====================

    def _find(self, path: str) -> Optional[Node]:
        return self.root.find_child_by_path(normalize_path(path))

    def _find_leaf(self, path: str) -> Optional[LeafNode]:
        return self._narc.find_leaf(normalize_path(path))

    def _find_branch(self, path: str) -> Optional[BranchNode]:
        return self.root.find_child_by_path(normalize_path(path), BranchNode)

    # ==================== 读取 ====================

    def get_file(self, path: str) -> bytes:
        """读取文件内容，不存在时返回 b''"""
        leaf = self._find_leaf(path)
        if leaf is None or leaf.contents is None:
            return b''
        return leaf.contents

    def try_get_file(self, path: str) -> Tuple[bool, bytes]:
        """
        读取文件内容

        Returns:
            (是否找到, 内容)，找不到时内容为 b''
        """
        leaf = self._find_leaf(path)
        if leaf is None or leaf.contents is None:
            return False, b''
        return True, leaf.contents

    def exists(self, path: str) -> bool:
        """路径是否存在 (文件或目录)"""
        return self._find(path) is not None or self._find_leaf(path) is not None

    def is_file(self, path: str) -> bool:
        return self._find_leaf(path) is not None

    def is_dir(self, path: str) -> bool:
        return self._find_branch(path) is not None

    # ==================== 写入 ====================

    def add_file(self, path: str, data: bytes) -> None:
        """
        写入文件，已存在则覆盖内容

        缺失的中间目录会被创建，已存在的目录会被复用。

        Raises:
            ValueError: 路径为空 (指向根目录)
            NotADirectoryError: 中间某段已经是文件
            IsADirectoryError: 目标路径已经是目录
        """
        parent_path, name = split_parent(path)
        if not name:
            raise ValueError("文件路径不能为空")

        current = self.root
        for segment in split_path(parent_path):
            child = current.get_child(segment)
            if child is None:
                child = current.add_child(BranchNode(segment))
            elif not isinstance(child, BranchNode):
                raise NotADirectoryError(f"路径中的 '{segment}' 是文件: {path}")
            current = child

        self._put_leaf(current, name, data, path)

    def add_file_root(self, name: str, data: bytes) -> None:
        """
        直接在根目录下写入文件，不拆分路径

        Raises:
            IsADirectoryError: 根目录下已有同名目录
        """
        self._put_leaf(self.root, name, data, name)

    @staticmethod
    def _put_leaf(parent: BranchNode, name: str, data: bytes, path: str) -> None:
        existing = parent.get_child(name)
        if existing is None:
            parent.add_child(LeafNode(name, data))
            logger.debug("新增文件 %s (%d 字节)", path, len(data))
        elif isinstance(existing, LeafNode):
            existing.contents = data
            logger.debug("覆盖文件 %s (%d 字节)", path, len(data))
        else:
            raise IsADirectoryError(f"目标是目录: {path}")

    # ==================== 删除 ====================

    def remove_file(self, path: str) -> bool:
        """删除文件，找不到时返回 False"""
        leaf = self._find_leaf(path)
        if leaf is None:
            return False
        return self._detach(leaf)

    def remove_directory(self, path: str, recursive: bool = False) -> bool:
        """
        删除目录

        Args:
            path: 目录路径
            recursive: 为 True 时连同所有子文件和子目录一起删除

        Returns:
            是否删除成功。目录不存在、是根目录、
            或者非空且 recursive 为 False 时返回 False
        """
        if not split_path(path):
            return False
        branch = self._find_branch(path)
        if branch is None or (not recursive and branch.has_children):
            return False
        return self._remove_branch(branch)

    @classmethod
    def _remove_branch(cls, branch: BranchNode) -> bool:
        for node in branch:
            if isinstance(node, BranchNode):
                cls._remove_branch(node)
            else:
                cls._detach(node)
        return cls._detach(branch)

    @staticmethod
    def _detach(node: Node) -> bool:
        parent = node.parent
        if parent is None:
            return False
        return parent.remove_child(node)

    # ==================== 列举 ====================

    def get_directory_contents(self, path: str) -> Optional[Dict[str, Node]]:
        """
        列出目录的直接子节点

        Returns:
            {名字: 节点}，路径不是目录时返回 None
        """
        branch = self._find_branch(path)
        if branch is None:
            return None
        return {node.name: node for node in branch}

    def list_directory_tree(self, path: str = "") -> List[str]:
        """
        深度优先列出起始目录及其下所有目录的路径 (不含文件)

        每个目录只出现一次，路径以起始路径为前缀；
        起始目录为根时以 '' 表示。起始路径不是目录时返回空列表。
        """
        start = self._find_branch(path)
        if start is None:
            return []

        result = []

        def visit(branch: BranchNode, branch_path: str):
            result.append(branch_path)
            for child in branch.child_branches:
                visit(child, join_path(branch_path, child.name))

        visit(start, normalize_path(path))
        return result

    def enumerate_files(self, directory: str = "/") -> Iterator[Tuple[str, bytes]]:
        """
        枚举目录下的直接文件 (不进入子目录)

        每次调用返回新的生成器；目录不存在时什么也不产出。

        Yields:
            (文件名, 内容) 元组
        """
        branch = self._find_branch(directory)
        if branch is None:
            return
        for leaf in branch.child_leaves:
            yield leaf.name, leaf.contents if leaf.contents is not None else b''

    def walk(self, path: str = "") -> Iterator[Tuple[str, List[str], List[str]]]:
        """
        类似 os.walk 的自顶向下遍历

        Yields:
            (目录路径, 子目录名列表, 文件名列表)
        """
        start = self._find_branch(path)
        if start is None:
            return
        stack = [(normalize_path(path), start)]
        while stack:
            dir_path, branch = stack.pop()
            branches = branch.child_branches
            yield dir_path, [b.name for b in branches], [leaf.name for leaf in branch.child_leaves]
            for child in reversed(branches):
                stack.append((join_path(dir_path, child.name), child))

    # ==================== 与归档同步 ====================

    def to_narc(self) -> Narc:
        """把目录树写回被包装的归档并返回它"""
        self._narc.sync_from_tree(self.root)
        return self._narc

    # ==================== 批量操作 API ====================

    def add_files_batch(
        self,
        items: 'List[FileItem] | Iterator[FileItem]',
        on_error: str = 'raise',
        progress_callback: Optional[Callable[[ProgressInfo], None]] = None
    ) -> BatchResult:
        """
        批量导入本地文件

        Args:
            items: FileItem 列表或迭代器
            on_error: 错误处理策略 ('raise', 'skip', 'abort')
            progress_callback: 进度回调函数

        Returns:
            BatchResult 批量操作结果
        """
        policy = ErrorPolicy(on_error)
        if not isinstance(items, list):
            items = list(items)

        tracker = ProgressTracker(
            total_files=len(items),
            total_bytes=estimate_total_bytes(items),
            callback=progress_callback
        )
        result = BatchResult()

        for item in items:
            vfs_path = item.vfs_path or os.path.basename(item.local_path)
            try:
                with open(item.local_path, 'rb') as f:
                    data = f.read()
                self.add_file(vfs_path, data)
            except (OSError, ValueError) as e:
                logger.debug("导入失败 %s: %s", item.local_path, e)
                if not result.record_failure(item.local_path, e, policy):
                    break
                tracker.update(item.local_path, 0)
                continue
            result.success_count += 1
            result.total_bytes += len(data)
            tracker.update(item.local_path, len(data))

        result.elapsed_time = tracker.finish()
        return result

    def add_dir(
        self,
        local_dir: str,
        mount_point: str = "/",
        recursive: bool = True,
        exclude_patterns: Optional[List[str]] = None,
        on_error: str = 'raise',
        progress_callback: Optional[Callable[[ProgressInfo], None]] = None
    ) -> BatchResult:
        """
        导入本地目录

        Raises:
            NotADirectoryError: local_dir 不是目录
        """
        if not os.path.isdir(local_dir):
            raise NotADirectoryError(f"不是目录: {local_dir}")
        items = list(scan_directory(local_dir, mount_point, recursive, exclude_patterns))
        return self.add_files_batch(items, on_error, progress_callback)

    def extract_all(
        self,
        output_dir: str,
        on_error: str = 'raise',
        progress_callback: Optional[Callable[[ProgressInfo], None]] = None
    ) -> BatchResult:
        """
        把所有文件按目录树解包到本地目录

        空目录也会被创建。

        Returns:
            BatchResult 批量操作结果
        """
        policy = ErrorPolicy(on_error)
        for dir_path, _, _ in self.walk():
            os.makedirs(os.path.join(output_dir, *split_path(dir_path)), exist_ok=True)
        entries = list(self._iter_leaves(self.root, ''))

        tracker = ProgressTracker(
            total_files=len(entries),
            total_bytes=sum(len(leaf.contents or b'') for _, leaf in entries),
            callback=progress_callback
        )
        result = BatchResult()

        for vfs_path, leaf in entries:
            data = leaf.contents or b''
            local_path = os.path.join(output_dir, *split_path(vfs_path))
            try:
                # 名字里带 '/' 的根目录文件没有对应的目录节点
                os.makedirs(os.path.dirname(local_path), exist_ok=True)
                with open(local_path, 'wb') as f:
                    f.write(data)
            except OSError as e:
                logger.debug("解包失败 %s: %s", vfs_path, e)
                if not result.record_failure(vfs_path, e, policy):
                    break
                tracker.update(vfs_path, 0)
                continue
            result.success_count += 1
            result.total_bytes += len(data)
            tracker.update(vfs_path, len(data))

        result.elapsed_time = tracker.finish()
        return result

    @classmethod
    def _iter_leaves(cls, branch: BranchNode, prefix: str) -> Iterator[Tuple[str, LeafNode]]:
        """深度优先产出 (路径, 文件节点)，按节点对象遍历而不是按路径重新查找"""
        for node in branch:
            path = join_path(prefix, node.name)
            if isinstance(node, BranchNode):
                yield from cls._iter_leaves(node, path)
            else:
                yield path, node
