"""
Symbol Table and Temporary Pool
===============================

Every value the program touches lives in a mailbox declared with DAT
after the HLT instruction. Three kinds of cell exist:

| Kind      | Label         | Created by                             |
|-----------|---------------|----------------------------------------|
| variable  | var_<name>    | first assignment or 'input' target     |
| temporary | tmp_<n>       | expression compiler spilling a value   |
| constant  | const_<value> | first use of a literal (deduplicated)  |

The LMC has no immediate operands, so literals are read from constant
cells like any other value.

A symbol's address is not known while code is being generated. Each
symbol owns a Label which the code generator defines at the symbol's
DAT instruction, and the label allocator resolves it with everything
else. Data cells are laid out in this order: variables in first-seen
order, then temporaries in allocation order, then constants in first-use
order. The order depends only on source order, so compilation is
deterministic.

No cell is ever freed. The TemporaryPool reuses a temporary once its
value is dead, but the cell itself stays allocated.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from lmc_sdk.errors import SourceLocation, find_similar_names
from lmc_sdk.compiler.errors import InternalCompilerError, UndeclaredIdentifierError
from lmc_sdk.compiler.instructions import Label
from lmc_sdk.compiler.labels import LabelAllocator

logger = logging.getLogger(__name__)


class SymbolKind(Enum):
    VARIABLE = auto()
    TEMPORARY = auto()
    CONSTANT = auto()


@dataclass
class Symbol:
    """
    A data cell.

    Attributes:
        name: Source name for variables, the label name otherwise
        kind: Variable, temporary or constant
        label: Label defined at this symbol's DAT instruction
        initial_value: Value the DAT declares (constants, folded initializers)
        location: Where a variable was first seen
        reads: Number of places the program reads this cell
    """
    name: str
    kind: SymbolKind
    label: Label
    initial_value: int = 0
    location: Optional[SourceLocation] = None
    reads: int = 0


class SymbolTable:
    """
    Maps variable names to cells and allocates temporaries and constants.

    Attributes:
        labels: The label allocator shared with the code generator
    """

    def __init__(self, labels: LabelAllocator):
        self.labels = labels
        self._variables: dict[str, Symbol] = {}
        self._temporaries: list[Symbol] = []
        self._constants: dict[int, Symbol] = {}

    def __len__(self) -> int:
        return len(self._variables) + len(self._temporaries) + len(self._constants)

    # =========================================================================
    # Variables
    # =========================================================================

    def resolve(self, name: str, location: Optional[SourceLocation] = None) -> Symbol:
        """Return the cell for `name`, allocating it if unseen."""
        symbol = self._variables.get(name)
        if symbol is None:
            symbol = Symbol(
                name=name,
                kind=SymbolKind.VARIABLE,
                label=self.labels.named_label(f"var_{name}"),
                location=location,
            )
            self._variables[name] = symbol
            logger.debug("Allocated variable '%s'", name)
        return symbol

    def lookup(self, name: str) -> Optional[Symbol]:
        return self._variables.get(name)

    def reference(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> Symbol:
        """
        Return the cell for a variable being read.

        Raises:
            UndeclaredIdentifierError: If nothing earlier in the source
                assigned or input the variable
        """
        symbol = self._variables.get(name)
        if symbol is None:
            raise UndeclaredIdentifierError(
                name,
                location=location,
                source_line=source_line,
                similar_identifiers=find_similar_names(name, self._variables),
            )
        symbol.reads += 1
        return symbol

    # =========================================================================
    # Temporaries and Constants
    # =========================================================================

    def new_temporary(self) -> Symbol:
        """Allocate a fresh cell that no name lookup will ever return."""
        name = f"tmp_{len(self._temporaries)}"
        symbol = Symbol(
            name=name,
            kind=SymbolKind.TEMPORARY,
            label=self.labels.named_label(name),
        )
        self._temporaries.append(symbol)
        logger.debug("Allocated temporary %s", name)
        return symbol

    def constant(self, value: int) -> Symbol:
        """Return the constant cell holding `value`, allocating it once."""
        if not 0 <= value <= 999:
            raise InternalCompilerError(f"constant {value} does not fit in a mailbox")

        symbol = self._constants.get(value)
        if symbol is None:
            name = f"const_{value}"
            symbol = Symbol(
                name=name,
                kind=SymbolKind.CONSTANT,
                label=self.labels.named_label(name),
                initial_value=value,
            )
            self._constants[value] = symbol
        return symbol

    # =========================================================================
    # Layout
    # =========================================================================

    @property
    def variables(self) -> list[Symbol]:
        return list(self._variables.values())

    @property
    def temporaries(self) -> list[Symbol]:
        return list(self._temporaries)

    @property
    def constants(self) -> list[Symbol]:
        return list(self._constants.values())

    def data_symbols(self) -> list[Symbol]:
        """All cells in layout order: variables, temporaries, constants."""
        return self.variables + self.temporaries + self.constants


class TemporaryPool:
    """
    Explicit stack of temporaries for the expression compiler.

    The accumulator holds one value, so evaluating `a - (b + c)` must
    park `b + c` in memory while `a` is loaded. `acquire()` hands out a
    temporary that is not live; `release()` returns it. Temporaries are
    strictly nested, so release must happen in reverse acquisition order.

    Attributes:
        symbols: Table that allocates new temporary cells
    """

    def __init__(self, symbols: SymbolTable):
        self.symbols = symbols
        self._live: list[Symbol] = []
        self._free: list[Symbol] = []

    @property
    def depth(self) -> int:
        """Number of temporaries currently holding a value."""
        return len(self._live)

    def acquire(self) -> Symbol:
        if self._free:
            temp = self._free.pop()
        else:
            temp = self.symbols.new_temporary()
        self._live.append(temp)
        return temp

    def release(self, temp: Symbol) -> None:
        if not self._live or self._live[-1] is not temp:
            raise InternalCompilerError(f"temporary {temp.name} released out of order")
        self._live.pop()
        self._free.append(temp)
