"""Parsing of Intcode program text into immutable Program images."""

import pathlib
import re
from dataclasses import dataclass
from typing import Iterator, List, Tuple, Union

from .errors import LoadError

# =============================================================================
# Constants
# =============================================================================

WORD_BITS = 64
WORD_MIN = -(1 << (WORD_BITS - 1))
WORD_MAX = (1 << (WORD_BITS - 1)) - 1

_TOKEN_RE = re.compile(r'[+-]?[0-9]+')


# =============================================================================
# Program
# =============================================================================

@dataclass(frozen=True)
class Program:
    """An immutable sequence of signed 64-bit words."""
    words: Tuple[int, ...]

    def __post_init__(self):
        for i, word in enumerate(self.words):
            if not (WORD_MIN <= word <= WORD_MAX):
                raise ValueError(f"Program word at {i} out of int64 range: {word}")

    def __len__(self) -> int:
        return len(self.words)

    def __iter__(self) -> Iterator[int]:
        return iter(self.words)

    def __getitem__(self, index):
        return self.words[index]

    def __str__(self) -> str:
        return ",".join(str(word) for word in self.words)


# =============================================================================
# Loading
# =============================================================================

def _parse_token(token: str, index: int) -> int:
    stripped = token.strip()
    if not stripped:
        raise LoadError(f"Empty token at index {index}")
    if not _TOKEN_RE.fullmatch(stripped):
        raise LoadError(f"Invalid token {stripped!r} at index {index}")
    value = int(stripped)
    if not (WORD_MIN <= value <= WORD_MAX):
        raise LoadError(f"Token {stripped!r} at index {index} out of int64 range")
    return value


def parse_program(text: str) -> Program:
    """
    Parse comma-separated base-10 integers into a Program.

    Args:
        text: Program text, optionally surrounded by whitespace

    Returns:
        The parsed Program

    Raises:
        LoadError: If any token is empty, non-numeric or out of range
    """
    stripped = text.strip()
    if not stripped:
        raise LoadError("Program text is empty")
    return Program(tuple(
        _parse_token(token, i) for i, token in enumerate(stripped.split(","))
    ))


def parse_programs(text: str) -> List[Program]:
    """Parse one Program per non-blank line."""
    return [parse_program(line) for line in text.splitlines() if line.strip()]


def load_program(path: Union[str, pathlib.Path]) -> Program:
    """Read a file and parse the first program in it."""
    text = pathlib.Path(path).read_text()
    programs = parse_programs(text)
    if not programs:
        raise LoadError(f"No program found in {path}")
    return programs[0]
