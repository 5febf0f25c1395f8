"""
Little Man Computer Emulator
============================

Executes a 100-mailbox memory image.

Machine Model
-------------
- Memory: 100 mailboxes (00-99), each holding 000-999
- Accumulator: one value 000-999
- Negative flag: set by SUB when the exact difference is below zero,
  cleared by ADD, LDA and INP; BRP branches when it is clear
- Program counter: starts at 00, wraps from 99 to 00

Arithmetic wraps modulo 1000, so the accumulator always holds 000-999
and the flag is the only record of a negative result:

    acc = 3, SUB of 5  ->  acc = 998, negative flag set

Instrumentation
---------------
`trace(pc, word, state)` is called before each instruction executes.

Example:
    >>> from lmc_sdk.emulator import LittleManComputer
    >>> lmc = LittleManComputer([901, 902, 0])
    >>> lmc.run(inputs=[42])
    [42]
"""

import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional

from lmc_sdk.errors import (
    InputExhaustedError,
    InvalidInputError,
    InvalidInstructionError,
    StepLimitExceededError,
)
from lmc_sdk.assembler.opcodes import MAILBOX_COUNT, MAX_WORD, decode

logger = logging.getLogger(__name__)


DEFAULT_MAX_STEPS = 10000


@dataclass
class MachineState:
    """
    Register state for snapshotting and tracing.

    Attributes:
        accumulator: 000-999
        pc: Address of the next instruction
        negative: Negative flag from the last arithmetic/load
        halted: True once HLT has executed
        steps: Instructions executed since reset
    """
    accumulator: int = 0
    pc: int = 0
    negative: bool = False
    halted: bool = False
    steps: int = 0


class LittleManComputer:
    """
    Little Man Computer emulator.

    Attributes:
        memory: Current mailbox contents
        outputs: Values written by OUT since the last reset
        trace: Optional hook called with (pc, word, state) before each
            instruction
        input_provider: Optional callable returning the next input value,
            used when the queued inputs run out
    """

    def __init__(self, memory: Optional[Iterable[int]] = None, capacity: int = MAILBOX_COUNT):
        self.capacity = capacity
        self._image = [0] * capacity
        self.memory: list[int] = []
        self.outputs: list[int] = []
        self.trace: Optional[Callable[[int, int, MachineState], None]] = None
        self.input_provider: Optional[Callable[[], int]] = None
        self._inputs: deque[int] = deque()
        self._state = MachineState()

        if memory is not None:
            self.load(memory)
        else:
            self.reset()

    def load(self, memory: Iterable[int]) -> None:
        """
        Load a memory image and reset.

        Raises:
            ValueError: If the image is too large or holds a word outside 0-999
        """
        image = list(memory)
        if len(image) > self.capacity:
            raise ValueError(f"memory image has {len(image)} words, machine has {self.capacity}")
        for address, word in enumerate(image):
            if not 0 <= word <= MAX_WORD:
                raise ValueError(f"mailbox {address:02d} holds {word}, outside 0-{MAX_WORD}")

        self._image = image + [0] * (self.capacity - len(image))
        self.reset()

    def reset(self) -> None:
        """Restore the loaded image and clear registers, inputs and outputs."""
        self.memory = list(self._image)
        self.outputs = []
        self._inputs.clear()
        self._state = MachineState()

    @property
    def state(self) -> MachineState:
        """Snapshot of the registers."""
        return replace(self._state)

    @property
    def halted(self) -> bool:
        return self._state.halted

    def provide_input(self, values: Iterable[int]) -> None:
        """Queue values for INP."""
        self._inputs.extend(values)

    # =========================================================================
    # Execution
    # =========================================================================

    def step(self) -> bool:
        """
        Execute one instruction.

        Returns:
            False once the machine has halted

        Raises:
            InvalidInstructionError: Word at PC does not decode
            InputExhaustedError: INP with no input available
            InvalidInputError: Input value outside 0-999
        """
        state = self._state
        if state.halted:
            return False

        pc = state.pc
        word = self.memory[pc]
        decoded = decode(word)
        if decoded is None:
            raise InvalidInstructionError(word, pc)

        mnemonic, address = decoded
        if address is not None and address >= self.capacity:
            raise InvalidInstructionError(word, pc)

        if self.trace is not None:
            self.trace(pc, word, replace(state))

        state.pc = (pc + 1) % self.capacity
        state.steps += 1

        if mnemonic == "LDA":
            state.accumulator = self.memory[address]
            state.negative = False
        elif mnemonic == "STA":
            self.memory[address] = state.accumulator
        elif mnemonic == "ADD":
            state.accumulator = (state.accumulator + self.memory[address]) % 1000
            state.negative = False
        elif mnemonic == "SUB":
            result = state.accumulator - self.memory[address]
            state.negative = result < 0
            state.accumulator = result % 1000
        elif mnemonic == "BRA":
            state.pc = address
        elif mnemonic == "BRZ":
            if state.accumulator == 0:
                state.pc = address
        elif mnemonic == "BRP":
            if not state.negative:
                state.pc = address
        elif mnemonic == "INP":
            state.accumulator = self._next_input(pc)
            state.negative = False
        elif mnemonic == "OUT":
            self.outputs.append(state.accumulator)
        elif mnemonic == "HLT":
            state.halted = True
            state.pc = pc
            logger.debug("Halted at %02d after %d steps", pc, state.steps)
            return False

        return True

    def _next_input(self, pc: int) -> int:
        if self._inputs:
            value = self._inputs.popleft()
        elif self.input_provider is not None:
            value = self.input_provider()
        else:
            raise InputExhaustedError(pc)

        if not 0 <= value <= MAX_WORD:
            raise InvalidInputError(value, pc)
        return value

    def run(
        self,
        inputs: Optional[Iterable[int]] = None,
        input_provider: Optional[Callable[[], int]] = None,
        max_steps: int = DEFAULT_MAX_STEPS,
    ) -> list[int]:
        """
        Run until HLT.

        Args:
            inputs: Values queued for INP, consumed in order
            input_provider: Called for each INP once `inputs` is used up
            max_steps: Maximum instructions to execute in this call

        Returns:
            All values output since the last reset

        Raises:
            StepLimitExceededError: If the program does not halt in time
            EmulatorError: On invalid instructions or input
        """
        if inputs is not None:
            self.provide_input(inputs)
        if input_provider is not None:
            self.input_provider = input_provider

        executed = 0
        while not self._state.halted:
            if executed >= max_steps:
                raise StepLimitExceededError(max_steps, self.outputs, self._state.pc)
            self.step()
            executed += 1

        return list(self.outputs)


def run_program(
    memory: Iterable[int],
    inputs: Optional[Iterable[int]] = None,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> list[int]:
    """Load a memory image, run it and return its outputs."""
    return LittleManComputer(memory).run(inputs=inputs, max_steps=max_steps)
