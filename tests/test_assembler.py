# =============================================================================
# test_assembler.py - LMC Assembler Tests
# =============================================================================
# Tests for the assembler package:
#   - Opcode table: encode, decode, disassemble
#   - Two-pass assembly: labels, comments, operands, DAT
#   - Error conditions with locations and suggestions
#   - Memory image text format
#   - Assembly and listing formatters used by the compiler
# =============================================================================

import pytest
from lmc_sdk.assembler import (
    Assembler,
    assemble,
    assemble_file,
    decode,
    disassemble,
    encode,
    format_assembly,
    format_listing,
    format_memory,
    parse_memory,
    to_mailboxes,
)
from lmc_sdk.assembler.opcodes import get_opcode_info, is_valid_mnemonic
from lmc_sdk.compiler.instructions import Opcode, ResolvedInstruction
from lmc_sdk.errors import (
    AssemblySyntaxError,
    DuplicateSymbolError,
    ProgramTooLargeError,
    UndefinedSymbolError,
)
from lmc_sdk.emulator import run_program


COUNTDOWN_ASM = """\
// count down from the input value
        INP
        STA num
loop    LDA num
        SUB one
        STA num
        OUT
        BRZ done
        BRA loop
done    HLT
num     DAT
one     DAT 1
"""


# =============================================================================
# Opcode Table Tests
# =============================================================================

class TestOpcodes:
    """Test instruction encoding and decoding."""

    @pytest.mark.parametrize("mnemonic,operand,word", [
        ("ADD", 5, 105),
        ("SUB", 99, 299),
        ("STA", 0, 300),
        ("LDA", 42, 542),
        ("BRA", 10, 610),
        ("BRZ", 11, 711),
        ("BRP", 12, 812),
        ("INP", None, 901),
        ("OUT", None, 902),
        ("HLT", None, 0),
        ("DAT", 123, 123),
        ("DAT", None, 0),
    ])
    def test_encode(self, mnemonic, operand, word):
        assert encode(mnemonic, operand) == word

    def test_encode_case_insensitive(self):
        assert encode("lda", 1) == 501

    @pytest.mark.parametrize("mnemonic,operand", [
        ("INP", 1),
        ("LDA", None),
        ("LDA", 100),
        ("DAT", 1000),
        ("MUL", 1),
    ])
    def test_encode_invalid(self, mnemonic, operand):
        with pytest.raises(ValueError):
            encode(mnemonic, operand)

    @pytest.mark.parametrize("word,expected", [
        (105, ("ADD", 5)),
        (542, ("LDA", 42)),
        (899, ("BRP", 99)),
        (901, ("INP", None)),
        (902, ("OUT", None)),
        (0, ("HLT", None)),
    ])
    def test_decode(self, word, expected):
        assert decode(word) == expected

    @pytest.mark.parametrize("word", [1, 42, 99, 400, 456, 900, 903, 999])
    def test_decode_invalid(self, word):
        assert decode(word) is None

    def test_disassemble(self):
        assert disassemble(505) == "LDA 05"
        assert disassemble(901) == "INP"
        assert disassemble(42) == "DAT 42"

    def test_opcode_lookup(self):
        assert get_opcode_info("brz").code == 700
        assert get_opcode_info("NOP") is None
        assert is_valid_mnemonic("dat")
        assert not is_valid_mnemonic("JMP")


# =============================================================================
# Assembly Tests
# =============================================================================

class TestAssembly:
    """Test assembling valid programs."""

    def test_minimal(self):
        memory = assemble("INP\nOUT\nHLT")
        assert len(memory) == 100
        assert memory[:3] == [901, 902, 0]

    def test_countdown(self):
        memory = assemble(COUNTDOWN_ASM)
        assert memory[:11] == [901, 309, 509, 210, 309, 902, 708, 602, 0, 0, 1]

    def test_countdown_runs(self):
        assert run_program(assemble(COUNTDOWN_ASM), [3]) == [2, 1, 0]

    def test_lowercase_mnemonics(self):
        assert assemble("inp\nout\nhlt")[:3] == [901, 902, 0]

    def test_numeric_operands(self):
        assert assemble("LDA 05\nSTA 99")[:2] == [505, 399]

    def test_label_on_own_line(self):
        asm = Assembler()
        asm.assemble("start\n    INP\n    BRA start")
        assert asm.get_symbols() == {"start": 0}

    def test_trailing_label(self):
        """A label after the last instruction names the first free mailbox."""
        asm = Assembler()
        asm.assemble("LDA free\nHLT\nfree")
        assert asm.get_symbols()["free"] == 2

    def test_semicolon_comments(self):
        assert assemble("INP ; read\nOUT ; write")[:2] == [901, 902]

    def test_labels_are_case_sensitive(self):
        asm = Assembler()
        asm.assemble("Loop INP\nloop OUT")
        assert asm.get_symbols() == {"Loop": 0, "loop": 1}

    def test_program_size(self):
        asm = Assembler()
        asm.assemble(COUNTDOWN_ASM)
        assert asm.program_size == 11

    def test_listing(self):
        asm = Assembler()
        asm.assemble(COUNTDOWN_ASM)
        listing = asm.get_listing()
        assert "LMC Assembler Listing" in listing
        assert "02    509      4  loop    LDA num" in listing
        assert "loop                 = 02" in listing

    def test_assemble_file(self, tmp_path):
        path = tmp_path / "countdown.asm"
        path.write_text(COUNTDOWN_ASM)
        assert assemble_file(path) == assemble(COUNTDOWN_ASM)

    def test_full_memory(self):
        memory = assemble("DAT 7\n" * 100)
        assert memory == [7] * 100


# =============================================================================
# Error Tests
# =============================================================================

class TestAssemblyErrors:
    """Test assembler error reporting."""

    def test_unknown_mnemonic(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            assemble("loop FOO 5")
        assert "unknown mnemonic 'FOO'" in str(exc_info.value)

    def test_invalid_label(self):
        with pytest.raises(AssemblySyntaxError):
            assemble("1abc INP")

    def test_operand_not_allowed(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            assemble("INP 5")
        assert "INP takes no operand" in str(exc_info.value)

    def test_operand_required(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            assemble("LDA")
        assert "LDA needs a mailbox address" in str(exc_info.value)

    def test_extra_field(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            assemble("LDA x y")
        assert "unexpected 'y' after operand" in str(exc_info.value)

    def test_undefined_symbol(self):
        with pytest.raises(UndefinedSymbolError) as exc_info:
            assemble("LDA cout\ncount DAT", "prog.asm")
        error = exc_info.value
        assert error.symbol == "cout"
        assert error.similar_symbols == ["count"]
        assert str(error).startswith("prog.asm:1:1: error: undefined symbol 'cout'")

    def test_duplicate_symbol(self):
        with pytest.raises(DuplicateSymbolError) as exc_info:
            assemble("a DAT\na DAT", "prog.asm")
        assert exc_info.value.original_location.line == 1
        assert "'a' was first defined at prog.asm:1:1" in str(exc_info.value)

    def test_address_out_of_range(self):
        with pytest.raises(AssemblySyntaxError):
            assemble("LDA 100")

    def test_dat_out_of_range(self):
        with pytest.raises(AssemblySyntaxError):
            assemble("DAT 1000")

    def test_negative_dat(self):
        with pytest.raises(AssemblySyntaxError):
            assemble("DAT -1")

    def test_too_large(self):
        with pytest.raises(ProgramTooLargeError) as exc_info:
            assemble("DAT\n" * 101)
        assert exc_info.value.size == 101
        assert exc_info.value.location.line == 101

    def test_error_location(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            assemble("INP\n    OUT 3", "prog.asm")
        assert exc_info.value.location.line == 2
        assert exc_info.value.location.column == 5


# =============================================================================
# Memory Image Format Tests
# =============================================================================

class TestMemoryFormat:
    """Test the 'NN WWW' memory image text format."""

    def test_format(self):
        memory = [901, 902, 0] + [0] * 97
        memory[5] = 7
        assert format_memory(memory) == "00 901\n01 902\n02 000\n03 000\n04 000\n05 007\n"

    def test_trailing_zeros_omitted(self):
        assert format_memory([901, 0, 0]) == "00 901\n"

    def test_format_with_disassembly(self):
        text = format_memory([505, 902])
        assert text == "00 505\n01 902\n"
        assert format_memory([505, 902], disassembly=True) == "00 505  LDA 05\n01 902  OUT\n"

    def test_parse_round_trip(self):
        memory = assemble(COUNTDOWN_ASM)
        assert parse_memory(format_memory(memory)) == memory

    def test_parse_with_disassembly(self):
        assert parse_memory("00 505  LDA 05\n01 902  OUT\n")[:2] == [505, 902]

    def test_parse_bare_words(self):
        assert parse_memory("901\n902\n\n0\n")[:3] == [901, 902, 0]

    def test_parse_sparse(self):
        memory = parse_memory("00 510\n10 042\n")
        assert memory[0] == 510
        assert memory[10] == 42
        assert len(memory) == 100

    @pytest.mark.parametrize("text", ["xyz\n", "00 1000\n", "100 001\n"])
    def test_parse_invalid(self, text):
        with pytest.raises(ValueError):
            parse_memory(text)


# =============================================================================
# Formatter Tests
# =============================================================================

def _program() -> list[ResolvedInstruction]:
    """INP / STA / BRA loop with two labels on the first mailbox."""
    return [
        ResolvedInstruction(0, Opcode.INP, labels=("while_0", "do_1")),
        ResolvedInstruction(1, Opcode.STA, 3, operand_label="var_x", comment="input x"),
        ResolvedInstruction(2, Opcode.BRA, 0, operand_label="do_1"),
        ResolvedInstruction(3, Opcode.DAT, 0, labels=("var_x",)),
    ]


class TestFormatter:
    """Test assembly and listing rendering."""

    def test_format_assembly(self):
        asm = format_assembly(_program())
        assert asm.splitlines() == [
            "while_0\tINP",
            "       \tSTA var_x\t// input x",
            "       \tBRA while_0",
            "var_x  \tDAT 0",
        ]

    def test_operands_use_first_label(self):
        """Only one label per line survives, so operands are rewritten to it."""
        asm = format_assembly(_program())
        assert "do_1" not in asm

    def test_without_comments(self):
        asm = format_assembly(_program(), comments=False)
        assert "//" not in asm

    def test_header(self):
        asm = format_assembly(_program(), header="generated")
        assert asm.splitlines()[0] == "// generated"

    def test_assembly_reassembles(self):
        memory = assemble(format_assembly(_program()))
        assert memory[:4] == [901, 303, 600, 0]

    def test_to_mailboxes(self):
        assert to_mailboxes(_program())[:4] == [901, 303, 600, 0]

    def test_to_mailboxes_too_large(self):
        with pytest.raises(ProgramTooLargeError):
            to_mailboxes(_program(), capacity=3)

    def test_listing(self):
        listing = format_listing(_program(), title="demo")
        lines = listing.splitlines()
        assert lines[0] == "LMC Listing: demo"
        assert "01    303                    STA var_x" in listing
        assert "do_1                 = 00" in listing
