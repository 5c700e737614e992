"""Conversion between host text and Intcode character-code words."""

from typing import Iterable, List

ASCII_MAX = 0x7F


def encode_text(text: str) -> List[int]:
    """
    Encode text as one word per character.

    Raises:
        UnicodeEncodeError: If text contains non-ASCII characters
    """
    return list(text.encode("ascii"))


def decode_text(values: Iterable[int]) -> str:
    """
    Decode output words into text.

    Words in the ASCII range become characters; any other word is written out
    in decimal followed by a newline.
    """
    return "".join(
        chr(value) if 0 <= value <= ASCII_MAX else f"{value}\n"
        for value in values
    )
