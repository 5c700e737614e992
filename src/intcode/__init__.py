"""Intcode: a resumable integer bytecode virtual machine."""

from .errors import (
    # Exceptions
    IntcodeError, LoadError, InputStarved,
    ExecutionFault, InvalidOpcode, InvalidMode, InvalidDestination,
    NegativeAddress, InvalidJumpTarget,
)

from .program import (
    WORD_BITS, WORD_MIN, WORD_MAX,
    Program, parse_program, parse_programs, load_program,
)

from .memory import Memory

from .decoder import (
    Opcode, Mode, OPCODE_SHAPES,
    Instruction, decode, format_instruction,
)

from .machine import (
    # Step results
    StepResult, Continue, Halted, InputNeeded, Fault,
    # VM & Execution
    IntcodeVM, run_program, wrap_word,
)

from .text import encode_text, decode_text

__version__ = "0.1.0"
