"""
Word Memory model for the completer.

Sparse memory indexed by bus address (one data word per address),
with fill helpers and file I/O for File-In/File-Out verification.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Dict, List
from pathlib import Path
import random


@dataclass
class MemoryConfig:
    """Memory configuration."""
    words: int = 1024           # Number of addressable words
    base_address: int = 0       # Bus address of word 0
    data_width: int = 32        # Bits per word

    @property
    def word_bytes(self) -> int:
        """Bytes per word when serialized."""
        return (self.data_width + 7) // 8

    @property
    def data_mask(self) -> int:
        return (1 << self.data_width) - 1

    @property
    def end_address(self) -> int:
        """First bus address past the memory."""
        return self.base_address + self.words


@dataclass
class MemoryStats:
    """Memory statistics."""
    reads: int = 0
    writes: int = 0


class Memory:
    """
    Simple word memory model.

    Unwritten words read as zero.
    """

    def __init__(
        self,
        config: Optional[MemoryConfig] = None,
        name: str = ""
    ):
        """
        Initialize memory.

        Args:
            config: Memory configuration.
            name: Memory name for identification.
        """
        self.config = config or MemoryConfig()
        self.name = name or "Memory"

        # Memory storage (sparse - only store written words)
        self._data: Dict[int, int] = {}  # address -> word

        # Statistics
        self.stats = MemoryStats()

    def contains(self, address: int) -> bool:
        """Check if a bus address maps into this memory."""
        return self.config.base_address <= address < self.config.end_address

    def _check_range(self, address: int, count: int = 1) -> None:
        if address < self.config.base_address or address + count > self.config.end_address:
            raise ValueError(f"Address out of range: 0x{address:X}")

    def write(self, address: int, value: int) -> None:
        """
        Write one word.

        Args:
            address: Bus address.
            value: Word value (masked to data_width).
        """
        self._check_range(address)
        self._data[address] = value & self.config.data_mask
        self.stats.writes += 1

    def read(self, address: int) -> int:
        """
        Read one word.

        Args:
            address: Bus address.

        Returns:
            Word value.
        """
        self._check_range(address)
        self.stats.reads += 1
        return self._data.get(address, 0)

    def fill(self, address: int, count: int, pattern: Optional[List[int]] = None) -> None:
        """
        Fill memory region with pattern.

        Args:
            address: Start address.
            count: Number of words to fill.
            pattern: Fill pattern (default: sequential words).
        """
        self._check_range(address, count)
        for i in range(count):
            value = i if pattern is None else pattern[i % len(pattern)]
            self._data[address + i] = value & self.config.data_mask

    def fill_random(self, address: int, count: int, seed: Optional[int] = None) -> None:
        """
        Fill memory region with random words.

        Args:
            address: Start address.
            count: Number of words to fill.
            seed: Random seed.
        """
        self._check_range(address, count)
        rng = random.Random(seed)
        for i in range(count):
            self._data[address + i] = rng.getrandbits(self.config.data_width)

    def clear(self) -> None:
        """Clear all memory contents."""
        self._data.clear()
        self.stats = MemoryStats()

    def verify(self, address: int, expected: List[int]) -> bool:
        """Check that words starting at address match expected."""
        return self.get_contents(address, len(expected)) == [
            value & self.config.data_mask for value in expected
        ]

    def get_contents(self, address: int, count: int) -> List[int]:
        """Get memory contents without updating stats."""
        return [self._data.get(address + i, 0) for i in range(count)]

    @property
    def used_words(self) -> int:
        """Number of words with data."""
        return len(self._data)

    # =========================================================================
    # File I/O Methods
    # =========================================================================

    def load_from_file(self, path: str | Path, address: Optional[int] = None) -> int:
        """
        Load little-endian binary words from file into memory.

        Args:
            path: Path to binary file.
            address: Start address (default: base address).

        Returns:
            Number of words loaded.

        Raises:
            FileNotFoundError: If file does not exist.
            ValueError: If data exceeds memory size.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        if address is None:
            address = self.config.base_address

        data = path.read_bytes()
        width = self.config.word_bytes
        count = (len(data) + width - 1) // width

        if address < self.config.base_address or address + count > self.config.end_address:
            raise ValueError(
                f"Data size ({count} words) exceeds available memory "
                f"(address=0x{address:X}, words={self.config.words})"
            )

        for i in range(count):
            chunk = data[i * width:(i + 1) * width]
            self._data[address + i] = int.from_bytes(chunk, "little")

        return count

    def dump_to_file(
        self,
        path: str | Path,
        address: Optional[int] = None,
        count: Optional[int] = None,
    ) -> int:
        """
        Dump memory contents to a little-endian binary file.

        Args:
            path: Output file path.
            address: Start address (default: base address).
            count: Number of words to dump (None = to end of memory).

        Returns:
            Number of words written.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if address is None:
            address = self.config.base_address
        if count is None or address + count > self.config.end_address:
            count = self.config.end_address - address

        width = self.config.word_bytes
        words = self.get_contents(address, count)
        path.write_bytes(b"".join(w.to_bytes(width, "little") for w in words))

        return len(words)

    def dump_to_hex(
        self,
        path: str | Path,
        address: Optional[int] = None,
        count: Optional[int] = None,
        words_per_line: int = 4,
    ) -> None:
        """
        Dump memory contents to hex text file.

        Args:
            path: Output file path.
            address: Start address to dump from.
            count: Number of words to dump.
            words_per_line: Words per line in output.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if address is None:
            address = self.config.base_address
        if count is None:
            count = self.config.end_address - address

        digits = self.config.word_bytes * 2
        words = self.get_contents(address, count)
        lines = []

        for offset in range(0, len(words), words_per_line):
            chunk = words[offset:offset + words_per_line]
            hex_part = " ".join(f"{w:0{digits}X}" for w in chunk)
            lines.append(f"{address + offset:08X}  {hex_part}")

        path.write_text("\n".join(lines) + "\n")
