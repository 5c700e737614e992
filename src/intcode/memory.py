"""Growable zero-filled word memory."""

from typing import Iterable, List

from .errors import NegativeAddress
from .program import WORD_MAX, WORD_MIN


class Memory:
    """
    Zero-indexed signed 64-bit word store.

    Reading or writing past the end extends memory with zeros first.
    Negative addresses raise NegativeAddress.
    """

    def __init__(self, words: Iterable[int] = ()):
        self._cells: List[int] = list(words)

    def _ensure(self, addr: int) -> None:
        if addr < 0:
            raise NegativeAddress(addr)
        if addr >= len(self._cells):
            self._cells.extend([0] * (addr + 1 - len(self._cells)))

    def read(self, addr: int) -> int:
        self._ensure(addr)
        return self._cells[addr]

    def write(self, addr: int, value: int) -> None:
        if not (WORD_MIN <= value <= WORD_MAX):
            raise ValueError(f"Value {value} out of int64 range")
        self._ensure(addr)
        self._cells[addr] = value

    def __getitem__(self, addr: int) -> int:
        return self.read(addr)

    def __setitem__(self, addr: int, value: int) -> None:
        self.write(addr, value)

    def __len__(self) -> int:
        return len(self._cells)

    def snapshot(self) -> List[int]:
        """Return a copy of the current cells."""
        return self._cells.copy()

    def __repr__(self) -> str:
        return f"Memory(size={len(self._cells)})"
