"""
lmcc - LMC Pseudocode Compiler Command-Line Interface
=====================================================

This module implements the command-line interface for the pseudocode
compiler. It compiles .lmc programs to Little Man Computer assembly.

Usage Examples
--------------
Basic compilation:
    $ lmcc countdown.lmc

With output file:
    $ lmcc countdown.lmc -o countdown.asm

Listing and memory image alongside the assembly:
    $ lmcc countdown.lmc --listing countdown.lst --mailboxes countdown.mem

Full pipeline:
    $ lmcc countdown.lmc && lmcrun countdown.asm -i 3

Verbose mode:
    $ lmcc -v countdown.lmc
"""

from pathlib import Path
from typing import Optional

import click

from lmc_sdk import __version__
from lmc_sdk.assembler import format_memory
from lmc_sdk.cli.errors import handle_cli_exception, setup_logging
from lmc_sdk.compiler import LMCCompiler, CompilerOptions


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output assembly file (default: input.asm, '-' for stdout)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write an address/machine-code listing",
)
@click.option(
    "-m", "--mailboxes",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the memory image ('NN WWW' per line)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print AST and exit (for debugging)",
)
@click.option(
    "-O", "--optimize/--no-optimize",
    default=True,
    help="Remove branches to the next instruction and unreachable code. "
         "Default: enabled.",
)
@click.option(
    "--fold-init",
    is_flag=True,
    help="Compile a first top-level 'x = <number>' as x's initial value",
)
@click.option(
    "-c", "--comments",
    is_flag=True,
    help="Annotate the assembly with the source of each statement",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="lmcc")
def main(
    input_file: Path,
    output: Optional[Path],
    listing: Optional[Path],
    mailboxes: Optional[Path],
    ast: bool,
    optimize: bool,
    fold_init: bool,
    comments: bool,
    verbose: bool,
) -> None:
    """
    Compile LMC pseudocode to Little Man Computer assembly.

    INPUT_FILE is the pseudocode source file (.lmc) to compile.

    The compiler produces assembly that can be loaded into any LMC
    simulator, assembled with lmcasm, or run directly with lmcrun.

    \b
    Examples:
        lmcc countdown.lmc               # Outputs countdown.asm
        lmcc countdown.lmc -o out.asm    # Specify output file
        lmcc countdown.lmc -o -          # Print assembly
        lmcc --ast countdown.lmc         # Show the syntax tree
        lmcc -v countdown.lmc            # Verbose output

    \b
    Language:
        input x / print expr / x = expr
        if cond ... else if cond ... else ... endif
        while cond ... endwhile, while true, break
        + and - with parentheses; == != < > <= >= in conditions
    """
    setup_logging(verbose)

    if output is None:
        output = input_file.with_suffix(".asm")

    options = CompilerOptions(
        optimize=optimize,
        fold_initializers=fold_init,
        emit_comments=comments,
    )

    try:
        if verbose:
            click.echo(f"Compiling {input_file}...")
            click.echo(f"Optimization: {'enabled' if optimize else 'disabled'}")

        source = input_file.read_text(encoding="utf-8")
        result = LMCCompiler(options).compile_source(source, str(input_file))

        if ast:
            from lmc_sdk.compiler.ast import ASTPrinter
            click.echo(ASTPrinter().print(result.ast))
            return

        if str(output) == "-":
            click.echo(result.assembly, nl=False)
        else:
            output.write_text(result.assembly, encoding="utf-8")

        if listing:
            listing.write_text(result.listing, encoding="utf-8")
        if mailboxes:
            mailboxes.write_text(format_memory(result.mailboxes), encoding="utf-8")

        if verbose:
            click.echo(f"Tokenized: {result.token_count} tokens")
            click.echo(f"Optimizer: {result.stats}")
            click.echo(f"Mailboxes used: {result.size}/{options.capacity}")

        if str(output) != "-":
            click.echo(f"Compiled {input_file} -> {output} ({result.size} mailboxes)")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
