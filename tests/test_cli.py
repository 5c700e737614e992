"""
Tests for the command-line runner.

Run with: uv run python tests/test_cli.py
"""

import argparse
import io
import os
import tempfile
from contextlib import redirect_stderr, redirect_stdout

from intcode.cli import (
    EXIT_HALTED, EXIT_FAULT, EXIT_SUSPENDED,
    RunnerConfig, build_parser, config_from_args, main, parse_poke, parse_step_limit,
    parse_text, run_with_config,
)
from intcode.program import parse_program


def run_cli(text, config, stdin=""):
    stdout, stderr = io.StringIO(), io.StringIO()
    status = run_with_config(parse_program(text), config, io.StringIO(stdin), stdout, stderr)
    return status, stdout.getvalue(), stderr.getvalue()


def test_run_with_config():
    print("Runner Tests")
    print("=" * 50)

    status, out, _ = run_cli("1,9,10,3,2,3,11,0,99,30,40,50", RunnerConfig(dump=[0, 3]))
    assert status == EXIT_HALTED
    assert out == "[0] = 3500\n[3] = 70\n"
    print("✓ Halt with memory dump")

    status, out, _ = run_cli("1,0,0,0,99,7,8", RunnerConfig(pokes=[(1, 5), (2, 6)], dump=[0]))
    assert status == EXIT_HALTED
    assert out == "[0] = 15\n"
    print("✓ Memory pokes before running")

    status, out, _ = run_cli("3,9,8,9,10,9,4,9,99,-1,8", RunnerConfig(inputs=[8]))
    assert status == EXIT_HALTED
    assert out == "1\n"
    print("✓ Queued inputs")

    status, out, err = run_cli("3,9,8,9,10,9,4,9,99,-1,8", RunnerConfig())
    assert status == EXIT_SUSPENDED
    assert out == ""
    assert "needs input at pc 0" in err
    print("✓ Input starvation exit status")

    status, _, err = run_cli("104,5,42", RunnerConfig())
    assert status == EXIT_FAULT
    assert "Fault: Unknown opcode 42" in err
    print("✓ Fault exit status")

    status, _, err = run_cli("1105,1,0", RunnerConfig(max_steps=10))
    assert status == EXIT_SUSPENDED
    assert "Step limit 10" in err
    print("✓ Step limit stops infinite loop")


def test_text_and_interactive():
    print("\nText and Interactive Tests")
    print("=" * 50)

    status, out, _ = run_cli("104,72,104,105,104,10,104,1000,99", RunnerConfig(ascii=True))
    assert status == EXIT_HALTED
    assert out == "Hi\n1000\n"
    print("✓ ASCII output")

    echo_two = "3,0,4,0,3,0,4,0,99"
    status, out, _ = run_cli(echo_two, RunnerConfig(ascii=True, texts=["o"]))
    assert status == EXIT_HALTED
    assert out == "o\n"
    print("✓ Text input gets a trailing newline")

    status, out, _ = run_cli("3,0,4,0,99", RunnerConfig(interactive=True), stdin="41\n")
    assert status == EXIT_HALTED
    assert out == "41\n"
    print("✓ Interactive integer input")

    status, out, err = run_cli("3,0,4,0,99", RunnerConfig(interactive=True), stdin="x\n-3\n")
    assert out == "-3\n"
    assert "Not an integer" in err
    print("✓ Interactive input skips bad lines")

    status, out, _ = run_cli(echo_two, RunnerConfig(interactive=True, ascii=True), stdin="ok\n")
    assert status == EXIT_HALTED
    assert out == "ok"
    print("✓ Interactive text input")

    status, _, err = run_cli("3,0,4,0,99", RunnerConfig(interactive=True), stdin="")
    assert status == EXIT_SUSPENDED
    print("✓ Interactive end of input suspends")


def test_non_ascii_text():
    print("\nNon-ASCII Text Tests")
    print("=" * 50)

    echo_two = "3,0,4,0,3,0,4,0,99"
    status, out, err = run_cli(
        echo_two, RunnerConfig(interactive=True, ascii=True), stdin="é\nok\n"
    )
    assert status == EXIT_HALTED
    assert out == "ok"
    assert "Not ASCII: 'é'" in err
    print("✓ Interactive text input skips non-ASCII lines")

    status, out, err = run_cli("3,0,4,0,99", RunnerConfig(interactive=True, ascii=True), stdin="é\n")
    assert status == EXIT_SUSPENDED
    assert out == ""
    print("✓ Only non-ASCII lines suspends")

    status, out, err = run_cli(echo_two, RunnerConfig(ascii=True, texts=["é"]))
    assert status == EXIT_FAULT
    assert out == ""
    assert "Not ASCII" in err
    print("✓ Non-ASCII queued text exits with fault status")

    status, out, err = run_cli(
        "3,0,4,0,99", RunnerConfig(interactive=True), stdin="99999999999999999999\n5\n"
    )
    assert status == EXIT_HALTED
    assert out == "5\n"
    assert "Out of int64 range" in err
    print("✓ Interactive input skips out-of-range integers")


def test_trace():
    print("\nTrace Tests")
    print("=" * 50)

    _, _, err = run_cli("104,72,99", RunnerConfig(trace=True))
    lines = err.splitlines()
    assert lines[0].endswith("0: OUT 72")
    assert lines[1].endswith("2: HALT")
    print("✓ One trace line per instruction")


def test_argument_parsing():
    print("\nArgument Parsing Tests")
    print("=" * 50)

    args = build_parser().parse_args(
        ["prog.txt", "-i", "1", "-i", "-2", "--set", "1=12", "--dump", "0", "-a", "-n", "50"]
    )
    config = config_from_args(args)
    assert args.program == "prog.txt"
    assert config.inputs == [1, -2]
    assert config.pokes == [(1, 12)]
    assert config.dump == [0]
    assert config.ascii
    assert config.max_steps == 50
    print("✓ Options map onto RunnerConfig")

    assert parse_poke("3=-7") == (3, -7)
    for bad in ("5", "a=1", "-1=4", "1=99999999999999999999"):
        try:
            parse_poke(bad)
            assert False, f"Should have rejected {bad!r}"
        except argparse.ArgumentTypeError:
            pass
    print("✓ ADDR=VALUE validation")

    assert parse_text("GO north") == "GO north"
    assert parse_step_limit("0") == 0
    for parse, bad in [(parse_text, "café"), (parse_step_limit, "-1"), (parse_step_limit, "x")]:
        try:
            parse(bad)
            assert False, f"Should have rejected {bad!r}"
        except argparse.ArgumentTypeError:
            pass
    print("✓ --text and --max-steps validation")

    for argv in (["prog.txt", "-t", "é"], ["prog.txt", "-n", "-1"]):
        err = io.StringIO()
        with redirect_stderr(err):
            try:
                build_parser().parse_args(argv)
                assert False, f"Should have rejected {argv}"
            except SystemExit as e:
                assert e.code == 2
        assert "error" in err.getvalue()
    print("✓ Parser exits with usage error")


def test_main():
    print("\nEntry Point Tests")
    print("=" * 50)

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "prog.txt")
        with open(path, "w") as f:
            f.write("1,0,0,0,99\n")

        out = io.StringIO()
        with redirect_stdout(out):
            status = main([path, "--set", "1=5", "--set", "2=6", "--dump", "0"])
        assert status == EXIT_HALTED
        assert out.getvalue() == "[0] = 0\n"
        print("✓ Runs program file")

        bad = os.path.join(tmp, "bad.txt")
        with open(bad, "w") as f:
            f.write("1,x,3\n")
        err = io.StringIO()
        with redirect_stderr(err):
            status = main([bad])
        assert status == EXIT_FAULT
        assert "Error: Invalid token 'x'" in err.getvalue()
        print("✓ Load error exit status")

        err = io.StringIO()
        with redirect_stderr(err):
            status = main([os.path.join(tmp, "missing.txt")])
        assert status == EXIT_FAULT
        assert "Error:" in err.getvalue()
        print("✓ Missing file exit status")


if __name__ == "__main__":
    test_run_with_config()
    test_text_and_interactive()
    test_non_ascii_text()
    test_trace()
    test_argument_parsing()
    test_main()

    print("\n" + "=" * 60)
    print("All tests passed!")
