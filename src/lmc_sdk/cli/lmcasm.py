"""
lmcasm - LMC Assembler Command-Line Interface
=============================================

Assembles Little Man Computer assembly into a memory image file.

Usage Examples
--------------
    $ lmcasm countdown.asm                  # Outputs countdown.mem
    $ lmcasm countdown.asm -o out.mem
    $ lmcasm countdown.asm -l countdown.lst
    $ lmcasm countdown.asm --disassemble -o -
"""

from pathlib import Path
from typing import Optional

import click

from lmc_sdk import __version__
from lmc_sdk.assembler import Assembler, format_memory
from lmc_sdk.cli.errors import handle_cli_exception, setup_logging


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
    help="Output memory image (default: input.mem, '-' for stdout)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-d", "--disassemble",
    is_flag=True,
    help="Append the decoded instruction to each memory line",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="lmcasm")
def main(
    input_file: Path,
    output: Optional[Path],
    listing: Optional[Path],
    disassemble: bool,
    verbose: bool,
) -> None:
    """
    Assemble Little Man Computer assembly.

    INPUT_FILE is the assembly source file (.asm) to assemble.

    The output holds one mailbox per line as "NN WWW" (address, word).
    Trailing empty mailboxes are omitted. lmcrun loads this format.

    \b
    Examples:
        lmcasm countdown.asm             # Outputs countdown.mem
        lmcasm countdown.asm -o out.mem  # Specify output file
        lmcasm countdown.asm -l out.lst  # Also write a listing
    """
    setup_logging(verbose)

    if output is None:
        output = input_file.with_suffix(".mem")

    try:
        asm = Assembler()
        memory = asm.assemble_file(input_file)
        text = format_memory(memory, disassembly=disassemble)

        if str(output) == "-":
            click.echo(text, nl=False)
        else:
            output.write_text(text, encoding="utf-8")

        if listing:
            listing.write_text(asm.get_listing(), encoding="utf-8")

        if verbose:
            symbols = asm.get_symbols()
            click.echo(f"Labels: {len(symbols)}")
            for name, address in sorted(symbols.items(), key=lambda item: item[1]):
                click.echo(f"  {address:02d}  {name}")

        if str(output) != "-":
            click.echo(f"Assembled {input_file} -> {output} ({asm.program_size} mailboxes)")

    except Exception as e:
        handle_cli_exception(e, verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
