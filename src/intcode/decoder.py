from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional, Sequence, Tuple

from .errors import InvalidMode, InvalidOpcode

# =============================================================================
# Opcodes and modes
# =============================================================================

class Opcode(IntEnum):
    ADD = 1
    MUL = 2
    IN = 3
    OUT = 4
    JNZ = 5
    JZ = 6
    LT = 7
    EQ = 8
    ARB = 9
    HALT = 99


class Mode(IntEnum):
    POSITION = 0
    IMMEDIATE = 1
    RELATIVE = 2


# Number of parameters and index of the destination parameter, if any.
OPCODE_SHAPES: Dict[Opcode, Tuple[int, Optional[int]]] = {
    Opcode.ADD:  (3, 2),
    Opcode.MUL:  (3, 2),
    Opcode.IN:   (1, 0),
    Opcode.OUT:  (1, None),
    Opcode.JNZ:  (2, None),
    Opcode.JZ:   (2, None),
    Opcode.LT:   (3, 2),
    Opcode.EQ:   (3, 2),
    Opcode.ARB:  (1, None),
    Opcode.HALT: (0, None),
}


# =============================================================================
# Instruction
# =============================================================================

@dataclass(frozen=True)
class Instruction:
    """A decoded instruction word: opcode plus one mode per parameter."""
    word: int
    opcode: Opcode
    modes: Tuple[Mode, ...]

    @property
    def length(self) -> int:
        """Instruction length in words, including the opcode word."""
        return len(self.modes) + 1

    @property
    def destination(self) -> Optional[int]:
        return OPCODE_SHAPES[self.opcode][1]


def decode(word: int, pc: Optional[int] = None) -> Instruction:
    """
    Decode a single instruction word.

    Args:
        word: The word at the program counter
        pc: Address of the word, reported in faults

    Returns:
        The decoded Instruction

    Raises:
        InvalidOpcode: If the low two digits are not a known opcode
        InvalidMode: If a parameter's mode digit is not 0, 1 or 2
    """
    if word < 0:
        raise InvalidOpcode(word, pc)
    try:
        opcode = Opcode(word % 100)
    except ValueError:
        raise InvalidOpcode(word, pc) from None

    param_count, _ = OPCODE_SHAPES[opcode]
    modes = []
    for i in range(param_count):
        digit = (word // 10 ** (i + 2)) % 10
        try:
            modes.append(Mode(digit))
        except ValueError:
            raise InvalidMode(word, i, digit, pc) from None
    return Instruction(word, opcode, tuple(modes))


# =============================================================================
# Disassembly
# =============================================================================

def format_param(mode: Mode, value: int) -> str:
    match mode:
        case Mode.POSITION:
            return f"[{value}]"
        case Mode.IMMEDIATE:
            return str(value)
        case Mode.RELATIVE:
            return f"[rb{value:+d}]"


def format_instruction(instr: Instruction, params: Sequence[int]) -> str:
    """Render an instruction and its raw parameter words as one line of text."""
    name = instr.opcode.name
    if not instr.modes:
        return name
    args = ", ".join(format_param(mode, value) for mode, value in zip(instr.modes, params))
    return f"{name} {args}"
