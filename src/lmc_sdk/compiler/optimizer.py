"""
Branch Optimizer
================

Safe peephole optimizations over the symbolic instruction list, run
before HLT and the data cells are appended.

Control-flow lowering always emits the full branch sequence for a
construct, so it regularly produces jumps to the very next instruction
(the final `BRA then` of a `!=` test, the `BRA endif` closing the last
branch of an if chain) and code that can never run (anything after a
`break`).

Supported Optimizations
-----------------------
1. **Branch to next**: a BRA, BRZ or BRP whose target label is defined at
   the following position is removed. Falling through reaches the same
   instruction, so behavior is unchanged.
2. **Dead code**: instructions after a BRA, up to the next position where
   any label is defined, are unreachable and removed.

Passes run until neither changes anything. Every removal is reported to
the LabelAllocator so label positions stay correct.
"""

import logging
from dataclasses import dataclass

from lmc_sdk.compiler.instructions import Instruction, Label, Opcode
from lmc_sdk.compiler.labels import LabelAllocator

logger = logging.getLogger(__name__)


@dataclass
class OptimizationStats:
    """
    Statistics about optimizations performed.

    Attributes:
        branch_to_next: Count of branches to the next instruction removed
        dead_code: Count of unreachable instructions removed
        total_passes: Number of optimization passes run
    """
    branch_to_next: int = 0
    dead_code: int = 0
    total_passes: int = 0

    @property
    def total_optimizations(self) -> int:
        return self.branch_to_next + self.dead_code

    def __str__(self) -> str:
        return (
            f"{self.total_optimizations} optimizations in {self.total_passes} passes "
            f"({self.branch_to_next} branch-to-next, {self.dead_code} dead code)"
        )


class BranchOptimizer:
    """
    Removes redundant branches and unreachable code.

    Usage:
        optimizer = BranchOptimizer(labels)
        instructions = optimizer.optimize(instructions)
        print(optimizer.stats)
    """

    def __init__(self, labels: LabelAllocator, enabled: bool = True):
        self.labels = labels
        self.enabled = enabled
        self.stats = OptimizationStats()

    def optimize(self, instructions: list[Instruction]) -> list[Instruction]:
        if not self.enabled:
            return instructions

        result = list(instructions)
        changed = True
        while changed:
            self.stats.total_passes += 1
            changed = self._branch_to_next_pass(result)
            changed = self._dead_code_pass(result) or changed

        if self.stats.total_optimizations:
            logger.debug("Branch optimizer: %s", self.stats)
        return result

    def _remove(self, instructions: list[Instruction], position: int) -> None:
        del instructions[position]
        self.labels.remove_position(position)

    def _branch_to_next_pass(self, instructions: list[Instruction]) -> bool:
        changed = False
        i = 0
        while i < len(instructions):
            instr = instructions[i]
            if (
                instr.opcode.is_branch and
                isinstance(instr.operand, Label) and
                self.labels.is_defined(instr.operand) and
                self.labels.address_of(instr.operand) == i + 1
            ):
                self._remove(instructions, i)
                self.stats.branch_to_next += 1
                changed = True
                continue
            i += 1
        return changed

    def _dead_code_pass(self, instructions: list[Instruction]) -> bool:
        changed = False
        for i, instr in enumerate(instructions):
            if instr.opcode != Opcode.BRA:
                continue
            j = i + 1
            while j < len(instructions) and not self.labels.labels_at(j):
                self._remove(instructions, j)
                self.stats.dead_code += 1
                changed = True
        return changed
