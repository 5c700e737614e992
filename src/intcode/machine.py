from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Iterable, List, Optional

from .decoder import Instruction, Mode, Opcode, decode, format_instruction
from .errors import (
    ExecutionFault, InputStarved, InvalidDestination, InvalidJumpTarget, NegativeAddress,
)
from .memory import Memory
from .program import WORD_BITS, WORD_MAX, WORD_MIN, Program, parse_program
from .text import encode_text

# Returns the next input word, or None to suspend. A value outside int64 raises
# ValueError from step(); the machine stays on the Input instruction and can be
# resumed.
InputProvider = Callable[[], Optional[int]]
OutputSink = Callable[[int], None]

WORD_MODULUS = 1 << WORD_BITS


def _check_input(value: int, source: str, pc: int) -> None:
    if not (WORD_MIN <= value <= WORD_MAX):
        raise ValueError(f"{source} {value} out of int64 range at pc {pc}")


def wrap_word(value: int) -> int:
    """Wrap an integer to signed 64-bit two's complement."""
    return ((value - WORD_MIN) % WORD_MODULUS) + WORD_MIN


def no_input() -> Optional[int]:
    return None


def print_output(value: int) -> None:
    print(value)


# =============================================================================
# Step results
# =============================================================================

@dataclass(frozen=True)
class StepResult:
    """Base class for step and run outcomes - used as a union type."""


@dataclass(frozen=True)
class Continue(StepResult):
    pass


@dataclass(frozen=True)
class Halted(StepResult):
    pass


@dataclass(frozen=True)
class InputNeeded(StepResult):
    pass


@dataclass(frozen=True)
class Fault(StepResult):
    error: ExecutionFault

    @property
    def reason(self) -> str:
        return str(self.error)


CONTINUE = Continue()
HALTED = Halted()
INPUT_NEEDED = InputNeeded()

_ARITHMETIC = {
    Opcode.ADD: lambda a, b: wrap_word(a + b),
    Opcode.MUL: lambda a, b: wrap_word(a * b),
    Opcode.LT:  lambda a, b: 1 if a < b else 0,
    Opcode.EQ:  lambda a, b: 1 if a == b else 0,
}


# =============================================================================
# Virtual machine
# =============================================================================

class IntcodeVM:
    """
    A resumable Intcode machine.

    Each instance owns its memory, program counter, relative base and input
    queue. Execution is driven from outside through step() and run(); a
    starved Input instruction returns InputNeeded instead of blocking, and
    the next call retries it.
    """

    def __init__(self, program: Program):
        self.memory = Memory(program.words)
        self.pc = 0
        self.relative_base = 0
        self.input_queue: Deque[int] = deque()
        self._final: Optional[StepResult] = None

    @classmethod
    def from_text(cls, text: str) -> 'IntcodeVM':
        return cls(parse_program(text))

    @property
    def finished(self) -> bool:
        """True once the machine has halted or faulted."""
        return self._final is not None

    # -------------------------------------------------------------------------
    # Input queue
    # -------------------------------------------------------------------------

    def push_input(self, *values: int) -> None:
        for value in values:
            if not (WORD_MIN <= value <= WORD_MAX):
                raise ValueError(f"Input value {value} out of int64 range")
        self.input_queue.extend(values)

    def push_text(self, text: str) -> None:
        """Queue the character codes of text."""
        self.input_queue.extend(encode_text(text))

    # -------------------------------------------------------------------------
    # Operand resolution
    # -------------------------------------------------------------------------

    def _address(self, instr: Instruction, params: List[int], i: int) -> int:
        match instr.modes[i]:
            case Mode.POSITION:
                addr = params[i]
            case Mode.RELATIVE:
                addr = params[i] + self.relative_base
            case _:
                raise InvalidDestination(instr.word, i, self.pc)
        if addr < 0:
            raise NegativeAddress(addr, self.pc)
        return addr

    def _value(self, instr: Instruction, params: List[int], i: int) -> int:
        if instr.modes[i] == Mode.IMMEDIATE:
            return params[i]
        return self.memory.read(self._address(instr, params, i))

    def _fetch(self) -> tuple[Instruction, List[int]]:
        instr = decode(self.memory.read(self.pc), self.pc)
        params = [self.memory.read(self.pc + 1 + i) for i in range(len(instr.modes))]
        return instr, params

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def _execute(self, input_provider: InputProvider, output_sink: OutputSink) -> StepResult:
        instr, params = self._fetch()

        match instr.opcode:
            case Opcode.ADD | Opcode.MUL | Opcode.LT | Opcode.EQ:
                a = self._value(instr, params, 0)
                b = self._value(instr, params, 1)
                dst = self._address(instr, params, 2)
                self.memory.write(dst, _ARITHMETIC[instr.opcode](a, b))

            case Opcode.IN:
                dst = self._address(instr, params, 0)
                if self.input_queue:
                    _check_input(self.input_queue[0], "Queued input", self.pc)
                    value = self.input_queue.popleft()
                else:
                    value = input_provider()
                    if value is None:
                        return INPUT_NEEDED
                    _check_input(value, "Input provider returned", self.pc)
                self.memory.write(dst, value)

            case Opcode.OUT:
                output_sink(self._value(instr, params, 0))

            case Opcode.JNZ | Opcode.JZ:
                cond = self._value(instr, params, 0)
                target = self._value(instr, params, 1)
                if (cond != 0) == (instr.opcode == Opcode.JNZ):
                    if not (0 <= target < len(self.memory)):
                        raise InvalidJumpTarget(target, len(self.memory), self.pc)
                    self.pc = target
                    return CONTINUE

            case Opcode.ARB:
                self.relative_base += self._value(instr, params, 0)

            case Opcode.HALT:
                return HALTED

        self.pc += instr.length
        return CONTINUE

    def step(self, input_provider: Optional[InputProvider] = None,
             output_sink: Optional[OutputSink] = None) -> StepResult:
        """
        Execute a single instruction.

        Args:
            input_provider: Called when an Input instruction finds the queue
                empty; returning None suspends the machine
            output_sink: Called with each Output value

        Returns:
            Continue, Halted, InputNeeded or Fault. Once Halted or Fault has
            been returned, every later call returns the same result.
        """
        if self._final is not None:
            return self._final
        try:
            result = self._execute(input_provider or no_input, output_sink or print_output)
        except ExecutionFault as e:
            result = Fault(e)
        if isinstance(result, (Halted, Fault)):
            self._final = result
        return result

    def run(self, input_provider: Optional[InputProvider] = None,
            output_sink: Optional[OutputSink] = None) -> StepResult:
        """
        Step until the machine halts, faults or runs out of input.

        Returns:
            Halted, InputNeeded or Fault. InputNeeded leaves the machine ready
            to resume with another call once input is available.
        """
        input_provider = input_provider or no_input
        output_sink = output_sink or print_output
        while True:
            result = self.step(input_provider, output_sink)
            if not isinstance(result, Continue):
                return result

    def describe(self) -> str:
        """Disassemble the instruction at the program counter."""
        word = self.memory.read(self.pc)
        try:
            instr, params = self._fetch()
        except ExecutionFault:
            return f"{self.pc:>6}: ??? {word}"
        return f"{self.pc:>6}: {format_instruction(instr, params)}"

    def __repr__(self) -> str:
        return (f"IntcodeVM(pc={self.pc}, relative_base={self.relative_base}, "
                f"memory={len(self.memory)}, queued={len(self.input_queue)})")


def run_program(program: Program, inputs: Iterable[int] = ()) -> List[int]:
    """
    Run a fresh machine to completion and collect its outputs.

    Raises:
        ExecutionFault: If the program faults
        InputStarved: If the program needs more input than was given
    """
    vm = IntcodeVM(program)
    vm.push_input(*inputs)
    outputs: List[int] = []
    result = vm.run(output_sink=outputs.append)
    match result:
        case Fault(error=error):
            raise error
        case InputNeeded():
            raise InputStarved(f"Program needs input at pc {vm.pc} after {len(outputs)} outputs")
    return outputs
