#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
树节点

BranchNode (目录) 拥有子节点，子节点通过弱引用指回父节点，
避免父子之间的循环引用。

树本身不保证兄弟节点重名检查，由文件系统层负责。
"""

import weakref
from typing import Iterator, List, Optional, Type, TypeVar

N = TypeVar('N', bound='Node')


class Node:
    """节点基类"""

    def __init__(self, name: str):
        self.name = name
        self._parent: Optional[weakref.ref] = None

    @property
    def parent(self) -> Optional['BranchNode']:
        """父节点，根节点或已脱离的节点为 None"""
        return self._parent() if self._parent is not None else None

    def _set_parent(self, parent: Optional['BranchNode']):
        self._parent = weakref.ref(parent) if parent is not None else None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class LeafNode(Node):
    """文件节点"""

    def __init__(self, name: str, contents: bytes = b''):
        super().__init__(name)
        self.contents = contents


class BranchNode(Node):
    """目录节点"""

    def __init__(self, name: str = ''):
        super().__init__(name)
        self._children: List[Node] = []

    # ==================== 子节点管理 ====================

    def add_child(self, child: Node) -> Node:
        """
        添加子节点

        如果子节点已挂在别的目录下，会先从原目录移除。
        """
        old_parent = child.parent
        if old_parent is not None:
            old_parent.remove_child(child)
        self._children.append(child)
        child._set_parent(self)
        return child

    def remove_child(self, child: Node) -> bool:
        """移除子节点 (按身份比较)，不存在时返回 False"""
        for i, node in enumerate(self._children):
            if node is child:
                del self._children[i]
                child._set_parent(None)
                return True
        return False

    def get_child(self, name: str) -> Optional[Node]:
        """按名称查找直接子节点"""
        for node in self._children:
            if node.name == name:
                return node
        return None

    def find_child_by_path(self, path: str, node_type: Type[N] = None) -> Optional[N]:
        """
        按 '/' 分隔的路径向下查找

        空段会被忽略，因此 '' 和 '/' 都指向自身。

        Args:
            path: 相对于本节点的路径
            node_type: 期望的节点类型，类型不符时返回 None
        """
        current: Node = self
        for segment in path.split('/'):
            if not segment:
                continue
            if not isinstance(current, BranchNode):
                return None
            current = current.get_child(segment)
            if current is None:
                return None
        if node_type is not None and not isinstance(current, node_type):
            return None
        return current

    # ==================== 访问 ====================

    @property
    def children(self) -> List[Node]:
        return list(self._children)

    @property
    def child_branches(self) -> List['BranchNode']:
        return [n for n in self._children if isinstance(n, BranchNode)]

    @property
    def child_leaves(self) -> List[LeafNode]:
        return [n for n in self._children if isinstance(n, LeafNode)]

    @property
    def has_children(self) -> bool:
        return bool(self._children)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._children))

    def __len__(self) -> int:
        return len(self._children)
