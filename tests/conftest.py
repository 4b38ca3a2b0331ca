#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
pytest 全局配置

提供共享 fixtures、自定义 markers 和测试工具。
"""

import pytest

from narcvfs import Narc, NarcFileSystem


# ==================== 自定义 Markers ====================

def pytest_configure(config):
    """注册自定义 markers"""
    config.addinivalue_line("markers", "slow: 耗时较长的测试")


# ==================== 基础 Fixtures ====================

@pytest.fixture
def sample_files(tmp_path) -> tuple:
    """
    创建本地测试文件集

    Returns:
        (目录路径, 文件内容字典)
    """
    files = {
        "hero.txt": b"Hero data content",
        "config.json": b'{"name": "test", "value": 123}',
        "subdir/data.bin": b"\x00\x01\x02\x03\x04\x05\x06\x07",
        "subdir/nested/deep.txt": b"Deep nested file content",
    }

    base = tmp_path / "src"
    for name, content in files.items():
        path = base / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    return base, files


@pytest.fixture
def sample_contents() -> dict:
    """归档内的文件 (顺序有意义)"""
    return {
        "a.bin": b"\x01\x02\x03",
        "b.txt": b"hello narc",
        "empty.dat": b"",
        "large.bin": bytes(range(256)) * 4,
    }


@pytest.fixture
def sample_narc(sample_contents) -> Narc:
    """预构建的 Narc 对象"""
    return Narc(sample_contents)


@pytest.fixture
def narc_bytes(sample_narc) -> bytes:
    """sample_narc 编码后的字节"""
    return sample_narc.to_bytes()


@pytest.fixture
def fs() -> NarcFileSystem:
    """空归档上的文件系统"""
    return NarcFileSystem()

