"""
Little Man Computer Emulator
============================

Runs memory images produced by the assembler or the compiler.

>>> from lmc_sdk.emulator import run_program
>>> run_program([901, 902, 0], inputs=[7])
[7]
"""

from lmc_sdk.emulator.machine import (
    DEFAULT_MAX_STEPS,
    LittleManComputer,
    MachineState,
    run_program,
)

__all__ = [
    "DEFAULT_MAX_STEPS",
    "LittleManComputer",
    "MachineState",
    "run_program",
]
