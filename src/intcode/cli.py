"""
Command-line runner for Intcode programs.

Loads a program file, applies memory pokes, queues inputs and drives a single
machine to completion, printing its outputs. The step limit lives here, not in
the machine: bounding execution is the host's job.
"""

import argparse
import sys
from dataclasses import dataclass, field
from typing import List, Optional, TextIO, Tuple

from .errors import IntcodeError
from .machine import Continue, Fault, Halted, IntcodeVM, InputNeeded
from .program import WORD_MAX, WORD_MIN, Program, load_program, parse_program
from .text import decode_text

EXIT_HALTED = 0
EXIT_FAULT = 1
EXIT_SUSPENDED = 2


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class RunnerConfig:
    """Options for a single command-line run."""
    inputs: List[int] = field(default_factory=list)
    texts: List[str] = field(default_factory=list)
    pokes: List[Tuple[int, int]] = field(default_factory=list)
    dump: List[int] = field(default_factory=list)
    ascii: bool = False
    interactive: bool = False
    trace: bool = False
    max_steps: Optional[int] = None


DEFAULT_CONFIG = RunnerConfig()


def parse_word(value: str) -> int:
    try:
        word = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer {value!r}") from None
    if not (WORD_MIN <= word <= WORD_MAX):
        raise argparse.ArgumentTypeError(f"{word} is out of int64 range")
    return word


def parse_address(value: str) -> int:
    addr = parse_word(value)
    if addr < 0:
        raise argparse.ArgumentTypeError(f"address must be non-negative, got {addr}")
    return addr


def parse_step_limit(value: str) -> int:
    try:
        limit = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer {value!r}") from None
    if limit < 0:
        raise argparse.ArgumentTypeError(f"step limit must be non-negative, got {limit}")
    return limit


def parse_text(value: str) -> str:
    if not value.isascii():
        raise argparse.ArgumentTypeError(f"text must be ASCII, got {value!r}")
    return value


def parse_poke(value: str) -> Tuple[int, int]:
    """Parse an ADDR=VALUE memory assignment."""
    addr, sep, word = value.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected ADDR=VALUE, got {value!r}")
    return parse_address(addr), parse_word(word)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="intcode", description="Run an Intcode program")
    parser.add_argument(
        "program",
        help="Path to the program file, or '-' to read it from stdin"
    )
    parser.add_argument(
        "-i", "--input",
        type=parse_word,
        action="append",
        default=[],
        dest="inputs",
        help="Queue an input value (repeatable)"
    )
    parser.add_argument(
        "-t", "--text",
        type=parse_text,
        action="append",
        default=[],
        dest="texts",
        help="Queue the character codes of a line of text, newline appended (repeatable)"
    )
    parser.add_argument(
        "--set",
        type=parse_poke,
        action="append",
        default=[],
        dest="pokes",
        metavar="ADDR=VALUE",
        help="Write VALUE to memory address ADDR before running (repeatable)"
    )
    parser.add_argument(
        "--dump",
        type=parse_address,
        action="append",
        default=[],
        metavar="ADDR",
        help="Print the value at ADDR after the run (repeatable)"
    )
    parser.add_argument(
        "-a", "--ascii",
        action="store_true",
        help="Print outputs as text and read interactive input as text lines"
    )
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Read a line from stdin whenever the program needs input"
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Write each executed instruction to stderr"
    )
    parser.add_argument(
        "-n", "--max-steps",
        type=parse_step_limit,
        default=None,
        help="Stop after this many instructions (default: unlimited)"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> RunnerConfig:
    return RunnerConfig(
        inputs=args.inputs,
        texts=args.texts,
        pokes=args.pokes,
        dump=args.dump,
        ascii=args.ascii,
        interactive=args.interactive,
        trace=args.trace,
        max_steps=args.max_steps,
    )


# =============================================================================
# Running
# =============================================================================

def _line_reader(vm: IntcodeVM, config: RunnerConfig, stdin: TextIO, stderr: TextIO):
    """Build an input provider that reads stdin one line at a time."""

    def provide() -> Optional[int]:
        while True:
            line = stdin.readline()
            if not line:
                return None
            if config.ascii:
                try:
                    vm.push_text(line if line.endswith("\n") else line + "\n")
                except UnicodeEncodeError:
                    print(f"Not ASCII: {line.rstrip()!r}", file=stderr)
                    continue
                return vm.input_queue.popleft()
            try:
                value = int(line.strip())
            except ValueError:
                print(f"Not an integer: {line.strip()!r}", file=stderr)
                continue
            if WORD_MIN <= value <= WORD_MAX:
                return value
            print(f"Out of int64 range: {value}", file=stderr)

    return provide


def run_with_config(
    program: Program,
    config: RunnerConfig = DEFAULT_CONFIG,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    """
    Run a program under the given configuration.

    Returns:
        Process exit status: 0 on halt, 1 on fault or non-ASCII text, 2 on
        input starvation or when the step limit is reached
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    vm = IntcodeVM(program)
    for addr, value in config.pokes:
        vm.memory[addr] = value
    vm.push_input(*config.inputs)
    for text in config.texts:
        try:
            vm.push_text(text if text.endswith("\n") else text + "\n")
        except UnicodeEncodeError:
            print(f"Not ASCII: {text!r}", file=stderr)
            return EXIT_FAULT

    def sink(value: int) -> None:
        if config.ascii:
            stdout.write(decode_text([value]))
        else:
            print(value, file=stdout)

    provider = _line_reader(vm, config, stdin, stderr) if config.interactive else None

    steps = 0
    while True:
        if config.max_steps is not None and steps >= config.max_steps:
            print(f"Step limit {config.max_steps} reached at pc {vm.pc}", file=stderr)
            status = EXIT_SUSPENDED
            break
        if config.trace:
            print(vm.describe(), file=stderr)
        result = vm.step(provider, sink)
        if isinstance(result, Continue):
            steps += 1
            continue
        if isinstance(result, Halted):
            status = EXIT_HALTED
        elif isinstance(result, InputNeeded):
            print(f"Program needs input at pc {vm.pc}", file=stderr)
            status = EXIT_SUSPENDED
        elif isinstance(result, Fault):
            print(f"Fault: {result.reason}", file=stderr)
            status = EXIT_FAULT
        break

    for addr in config.dump:
        print(f"[{addr}] = {vm.memory[addr]}", file=stdout)
    return status


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = config_from_args(args)
    try:
        if args.program == "-":
            program = parse_program(sys.stdin.read())
        else:
            program = load_program(args.program)
    except (IntcodeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAULT
    return run_with_config(program, config)


if __name__ == "__main__":
    sys.exit(main())
