"""
Tests for the completer word memory.

Tests cover:
1. Memory initialization
2. Read/write operations and range checks
3. Fill helpers
4. File I/O methods
"""

import pytest
from pathlib import Path
from tempfile import TemporaryDirectory

from apb_model.testbench.memory import Memory, MemoryConfig


class TestMemoryInitialization:
    """Test Memory initialization."""

    def test_default_initialization(self):
        """Memory should initialize with default config."""
        mem = Memory()
        assert mem.name == "Memory"
        assert mem.config.words == 1024
        assert mem.config.word_bytes == 4
        assert mem.used_words == 0

    def test_custom_initialization(self):
        config = MemoryConfig(words=16, base_address=0x100, data_width=16)
        mem = Memory(config, name="TestMem")
        assert mem.name == "TestMem"
        assert mem.config.end_address == 0x110
        assert mem.config.word_bytes == 2


class TestMemoryReadWrite:
    """Test Memory read/write operations."""

    def test_write_and_read(self):
        mem = Memory(MemoryConfig(words=16))
        mem.write(3, 0xBEAD)
        assert mem.read(3) == 0xBEAD
        assert mem.stats.writes == 1
        assert mem.stats.reads == 1

    def test_unwritten_reads_zero(self):
        assert Memory(MemoryConfig(words=16)).read(5) == 0

    def test_write_masks_value(self):
        mem = Memory(MemoryConfig(words=4, data_width=8))
        mem.write(0, 0x1FF)
        assert mem.read(0) == 0xFF

    @pytest.mark.parametrize("address", [-1, 16, 100])
    def test_out_of_range(self, address):
        mem = Memory(MemoryConfig(words=16))
        with pytest.raises(ValueError, match="Address out of range"):
            mem.write(address, 1)
        with pytest.raises(ValueError):
            mem.read(address)

    def test_contains_with_base(self):
        mem = Memory(MemoryConfig(words=4, base_address=8))
        assert not mem.contains(7)
        assert mem.contains(8)
        assert mem.contains(11)
        assert not mem.contains(12)

    def test_get_contents_does_not_count(self):
        mem = Memory(MemoryConfig(words=16))
        mem.write(1, 5)
        assert mem.get_contents(0, 3) == [0, 5, 0]
        assert mem.stats.reads == 0


class TestMemoryFill:
    """Test Memory fill helpers."""

    def test_sequential_fill(self):
        mem = Memory(MemoryConfig(words=16))
        mem.fill(2, 4)
        assert mem.get_contents(2, 4) == [0, 1, 2, 3]

    def test_pattern_fill(self):
        mem = Memory(MemoryConfig(words=16))
        mem.fill(0, 5, pattern=[0xA, 0xB])
        assert mem.verify(0, [0xA, 0xB, 0xA, 0xB, 0xA])

    def test_fill_random_reproducible(self):
        a = Memory(MemoryConfig(words=16))
        b = Memory(MemoryConfig(words=16))
        a.fill_random(0, 16, seed=3)
        b.fill_random(0, 16, seed=3)
        assert a.get_contents(0, 16) == b.get_contents(0, 16)

    def test_fill_random_unseeded(self):
        mem = Memory(MemoryConfig(words=8, data_width=8))
        mem.fill_random(0, 8, seed=None)
        assert all(0 <= value < 256 for value in mem.get_contents(0, 8))

    def test_fill_out_of_range(self):
        with pytest.raises(ValueError):
            Memory(MemoryConfig(words=4)).fill(2, 4)

    def test_clear(self):
        mem = Memory(MemoryConfig(words=4))
        mem.write(0, 1)
        mem.clear()
        assert mem.used_words == 0
        assert mem.stats.writes == 0


class TestMemoryFileIO:
    """Test Memory file I/O methods."""

    def test_dump_and_load(self):
        src = Memory(MemoryConfig(words=4))
        src.fill(0, 4, pattern=[0x11223344, 0xDEADBEEF])
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "mem.bin"
            assert src.dump_to_file(path) == 4
            assert path.read_bytes()[:4] == bytes([0x44, 0x33, 0x22, 0x11])

            dst = Memory(MemoryConfig(words=4))
            assert dst.load_from_file(path) == 4
        assert dst.get_contents(0, 4) == src.get_contents(0, 4)

    def test_load_missing_file(self):
        with pytest.raises(FileNotFoundError):
            Memory().load_from_file("/nonexistent/file.bin")

    def test_load_too_large(self):
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "big.bin"
            path.write_bytes(bytes(32))
            with pytest.raises(ValueError):
                Memory(MemoryConfig(words=4)).load_from_file(path)

    def test_dump_to_hex(self):
        mem = Memory(MemoryConfig(words=4))
        mem.fill(0, 4, pattern=[0xBEAD])
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "mem.hex"
            mem.dump_to_hex(path, words_per_line=2)
            lines = path.read_text().splitlines()
        assert lines == [
            "00000000  0000BEAD 0000BEAD",
            "00000002  0000BEAD 0000BEAD",
        ]
