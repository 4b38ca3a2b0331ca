#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
二进制 I/O 测试

测试 BinaryReader / BinaryWriter 的字节序、字符串、对齐和回写。
"""

import io

import pytest

from narcvfs.core.binary_io import BinaryReader, BinaryWriter, ByteOrder


# ==================== ByteOrder 测试 ====================

class TestByteOrder:
    """ByteOrder 测试"""

    def test_bom_bytes(self):
        """BOM 按各自字节序写出"""
        assert ByteOrder.LITTLE.bom == b'\xfe\xff'
        assert ByteOrder.BIG.bom == b'\xff\xfe'

    @pytest.mark.parametrize("order", list(ByteOrder))
    def test_from_bom(self, order):
        """由 BOM 还原字节序"""
        assert ByteOrder.from_bom(order.bom) is order

    def test_from_invalid_bom(self):
        """无效 BOM"""
        with pytest.raises(ValueError):
            ByteOrder.from_bom(b'\x00\x00')


# ==================== BinaryWriter 测试 ====================

class TestBinaryWriter:
    """BinaryWriter 测试"""

    @pytest.mark.parametrize("order,expected", [
        (ByteOrder.LITTLE, b'\x78\x56\x34\x12'),
        (ByteOrder.BIG, b'\x12\x34\x56\x78'),
    ])
    def test_write_u32_byte_order(self, order, expected):
        """u32 按字节序写出"""
        buffer = io.BytesIO()
        BinaryWriter(buffer, order).write_u32(0x12345678)
        assert buffer.getvalue() == expected

    def test_switch_byte_order(self):
        """切换字节序只影响之后的写入"""
        buffer = io.BytesIO()
        writer = BinaryWriter(buffer)
        writer.write_u16(0x0102)
        writer.byte_order = ByteOrder.BIG
        writer.write_u16(0x0102)
        assert buffer.getvalue() == b'\x02\x01\x01\x02'

    def test_write_u64(self):
        buffer = io.BytesIO()
        BinaryWriter(buffer).write_u64(0x0001000000000008)
        assert buffer.getvalue() == b'\x08\x00\x00\x00\x00\x00\x01\x00'

    def test_write_string(self):
        """长度前缀字符串"""
        buffer = io.BytesIO()
        written = BinaryWriter(buffer).write_string("abc")
        assert written == 4
        assert buffer.getvalue() == b'\x03abc'

    def test_write_string_too_long(self):
        """超过 255 字节"""
        with pytest.raises(ValueError):
            BinaryWriter(io.BytesIO()).write_string("x" * 256)

    def test_write_string_non_ascii(self):
        """非 ASCII 字符"""
        with pytest.raises(ValueError):
            BinaryWriter(io.BytesIO()).write_string("文件")

    def test_write_fill(self):
        buffer = io.BytesIO()
        BinaryWriter(buffer).write_fill(3, 0xFF)
        assert buffer.getvalue() == b'\xff\xff\xff'

    @pytest.mark.parametrize("prefix,alignment,expected_len", [
        (0, 16, 0),
        (1, 16, 16),
        (16, 16, 16),
        (17, 32, 32),
        (33, 32, 64),
    ])
    def test_align(self, prefix, alignment, expected_len):
        """对齐到绝对位置的整数倍，用零填充"""
        buffer = io.BytesIO()
        writer = BinaryWriter(buffer)
        writer.write_fill(prefix, 0xAA)
        writer.align(alignment)
        data = buffer.getvalue()
        assert len(data) == expected_len
        assert data[prefix:] == b'\x00' * (expected_len - prefix)

    def test_skip_does_not_write(self):
        """skip 只移动位置，后续写入时空洞补零"""
        buffer = io.BytesIO()
        writer = BinaryWriter(buffer)
        writer.skip(4)
        assert buffer.getvalue() == b''
        writer.write_u8(1)
        assert buffer.getvalue() == b'\x00\x00\x00\x00\x01'

    def test_reserve_and_patch(self):
        """预留占位后回写，位置不变"""
        buffer = io.BytesIO()
        writer = BinaryWriter(buffer)
        pos = writer.reserve(4)
        writer.write_bytes(b'tail')
        writer.patch_u32(pos, 8)
        assert writer.position == 8
        assert buffer.getvalue() == b'\x08\x00\x00\x00tail'

    def test_length(self):
        buffer = io.BytesIO()
        writer = BinaryWriter(buffer)
        writer.write_bytes(b'12345678')
        writer.seek(2)
        assert writer.length == 8
        assert writer.position == 2


# ==================== BinaryReader 测试 ====================

class TestBinaryReader:
    """BinaryReader 测试"""

    def test_read_integers(self):
        reader = BinaryReader(io.BytesIO(b'\x01\x02\x00\x03\x00\x00\x00'))
        assert reader.read_u8() == 1
        assert reader.read_u16() == 2
        assert reader.read_u32() == 3

    def test_read_big_endian(self):
        reader = BinaryReader(io.BytesIO(b'\x12\x34'), ByteOrder.BIG)
        assert reader.read_u16() == 0x1234

    def test_read_string(self):
        reader = BinaryReader(io.BytesIO(b'\x05hello!'))
        assert reader.read_string() == "hello"
        assert reader.position == 6

    def test_read_past_end(self):
        """流不足时抛出 EOFError"""
        reader = BinaryReader(io.BytesIO(b'\x01\x02'))
        with pytest.raises(EOFError):
            reader.read_u32()

    def test_peek_bytes(self):
        reader = BinaryReader(io.BytesIO(b'NARC'))
        assert reader.peek_bytes(2) == b'NA'
        assert reader.position == 0

    def test_read_tag(self):
        reader = BinaryReader(io.BytesIO(b'BTAF'))
        assert reader.read_tag() == 'BTAF'


# ==================== temporary_seek 测试 ====================

class TestTemporarySeek:
    """temporary_seek 测试"""

    def test_restores_position(self):
        reader = BinaryReader(io.BytesIO(b'\x00' * 16))
        reader.seek(4)
        with reader.temporary_seek(12) as origin:
            assert origin == 4
            assert reader.position == 12
            reader.read_u16()
        assert reader.position == 4

    def test_restores_on_exception(self):
        """异常退出时同样恢复位置"""
        reader = BinaryReader(io.BytesIO(b'\x00' * 4))
        reader.seek(1)
        with pytest.raises(EOFError):
            with reader.temporary_seek(2):
                reader.read_u64()
        assert reader.position == 1

    def test_without_position(self):
        """不指定位置时在原地开始"""
        writer = BinaryWriter(io.BytesIO())
        writer.write_bytes(b'abc')
        with writer.temporary_seek():
            writer.write_bytes(b'defg')
        assert writer.position == 3
