"""Exception hierarchy for loading and executing Intcode programs."""

from typing import Optional


class IntcodeError(Exception):
    """Base exception for all Intcode errors."""
    pass


class LoadError(IntcodeError):
    """Raised when program text cannot be parsed into a Program."""
    pass


class InputStarved(IntcodeError):
    """Raised by run_program when a program asks for more input than it was given."""
    pass


# =============================================================================
# Execution faults
# =============================================================================

class ExecutionFault(IntcodeError):
    """
    Base class for errors that terminate a VM instance.

    `pc` is the program counter of the faulting instruction, or None when the
    fault comes from host-side memory access outside of a step.
    """

    def __init__(self, message: str, pc: Optional[int] = None):
        self.pc = pc
        if pc is not None:
            message = f"{message} at pc {pc}"
        super().__init__(message)


class InvalidOpcode(ExecutionFault):
    """Raised when an instruction word does not decode to a known opcode."""

    def __init__(self, word: int, pc: Optional[int] = None):
        self.word = word
        self.opcode = word % 100 if word >= 0 else word
        super().__init__(f"Unknown opcode {self.opcode} (word {word})", pc)


class InvalidMode(ExecutionFault):
    """Raised when a parameter mode digit is not 0, 1 or 2."""

    def __init__(self, word: int, param: int, mode: int, pc: Optional[int] = None):
        self.word = word
        self.param = param
        self.mode = mode
        super().__init__(f"Invalid mode {mode} for parameter {param} (word {word})", pc)


class InvalidDestination(ExecutionFault):
    """Raised when a destination parameter uses immediate mode."""

    def __init__(self, word: int, param: int, pc: Optional[int] = None):
        self.word = word
        self.param = param
        super().__init__(f"Immediate mode destination for parameter {param} (word {word})", pc)


class NegativeAddress(ExecutionFault):
    """Raised when a memory address resolves below zero."""

    def __init__(self, address: int, pc: Optional[int] = None):
        self.address = address
        super().__init__(f"Negative address {address}", pc)


class InvalidJumpTarget(ExecutionFault):
    """Raised when a taken jump points outside of memory."""

    def __init__(self, target: int, memory_size: int, pc: Optional[int] = None):
        self.target = target
        self.memory_size = memory_size
        super().__init__(f"Jump target {target} outside memory of size {memory_size}", pc)
