"""
lmcrun - Little Man Computer Emulator Command-Line Interface
============================================================

Runs a program on the emulator and prints each OUT value on its own line.
The input kind is chosen by file extension:

- ``.lmc``: pseudocode, compiled first
- ``.asm``: assembly, assembled first
- anything else: a memory image as written by lmcasm

Usage Examples
--------------
    $ lmcrun countdown.lmc -i 3
    $ lmcrun add.asm -i 2 -i 40
    $ lmcrun add.mem --interactive
    $ lmcrun countdown.lmc -i 3 --trace
"""

from pathlib import Path

import click

from lmc_sdk import __version__
from lmc_sdk.assembler import Assembler, disassemble, parse_memory
from lmc_sdk.cli.errors import handle_cli_exception, setup_logging
from lmc_sdk.compiler import LMCCompiler, CompilerOptions
from lmc_sdk.emulator import DEFAULT_MAX_STEPS, LittleManComputer, MachineState
from lmc_sdk.errors import StepLimitExceededError


def load_program(input_file: Path, optimize: bool = True) -> list[int]:
    """Build a memory image from a pseudocode, assembly or memory file."""
    suffix = input_file.suffix.lower()
    if suffix == ".lmc":
        result = LMCCompiler(CompilerOptions(optimize=optimize)).compile_file(input_file)
        return result.mailboxes
    if suffix == ".asm":
        return Assembler().assemble_file(input_file)

    text = input_file.read_text(encoding="utf-8")
    try:
        return parse_memory(text)
    except ValueError as e:
        raise click.BadParameter(f"{input_file}: {e}") from None


def _print_trace(pc: int, word: int, state: MachineState) -> None:
    flag = "-" if state.negative else "+"
    click.echo(
        f"[{state.steps:5d}] {pc:02d}: {word:03d}  {disassemble(word):8s} "
        f"ACC={state.accumulator:03d}{flag}",
        err=True,
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-i", "--input", "inputs",
    multiple=True,
    type=click.IntRange(0, 999),
    help="Value for INP, consumed in order (can be repeated)",
)
@click.option(
    "--interactive",
    is_flag=True,
    help="Prompt for input once the -i values are used up",
)
@click.option(
    "-n", "--max-steps",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_STEPS,
    show_default=True,
    help="Stop a program that runs longer than this many instructions",
)
@click.option(
    "-t", "--trace",
    is_flag=True,
    help="Print every executed instruction to stderr",
)
@click.option(
    "-O", "--optimize/--no-optimize",
    default=True,
    help="Optimizer setting when compiling a .lmc file",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="lmcrun")
def main(
    input_file: Path,
    inputs: tuple[int, ...],
    interactive: bool,
    max_steps: int,
    trace: bool,
    optimize: bool,
    verbose: bool,
) -> None:
    """
    Run a program on the Little Man Computer emulator.

    INPUT_FILE is a pseudocode (.lmc), assembly (.asm) or memory image file.

    \b
    Examples:
        lmcrun countdown.lmc -i 3        # Prints 2, 1, 0
        lmcrun add.asm -i 2 -i 40        # Two inputs
        lmcrun add.mem --interactive     # Prompt for inputs
        lmcrun loop.lmc -n 500 --trace   # Step limit and trace

    \b
    Exit codes:
        0  program halted
        1  compile or assembly error
        2  bad arguments or memory file
        4  runtime error (bad instruction, no input, step limit)
    """
    setup_logging(verbose)

    try:
        memory = load_program(input_file, optimize=optimize)

        machine = LittleManComputer(memory)
        if trace:
            machine.trace = _print_trace
        if interactive:
            machine.input_provider = lambda: click.prompt("Input", type=click.IntRange(0, 999), err=True)

        # Outputs are echoed as they appear so interactive runs stay readable
        printed = 0
        machine.provide_input(inputs)
        steps = 0
        while not machine.halted:
            if steps >= max_steps:
                raise StepLimitExceededError(max_steps, machine.outputs, machine.state.pc)
            machine.step()
            steps += 1
            while printed < len(machine.outputs):
                click.echo(machine.outputs[printed])
                printed += 1

        if verbose:
            state = machine.state
            click.echo(f"Halted at {state.pc:02d} after {state.steps} steps", err=True)

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
