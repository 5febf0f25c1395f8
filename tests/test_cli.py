# =============================================================================
# test_cli.py - Command-Line Tool Tests
# =============================================================================
# Tests for lmcc, lmcasm and lmcrun using Click's CliRunner:
#   - Default output paths and status messages
#   - Printing to stdout with '-o -'
#   - Exit codes for build, argument and runtime errors
# =============================================================================

import pytest
from click.testing import CliRunner

from lmc_sdk import __version__
from lmc_sdk.assembler import parse_memory
from lmc_sdk.cli import lmcasm, lmcc, lmcrun
from lmc_sdk.cli.errors import ExitCode


COUNTDOWN = """\
input n
while n > 0
    n = n - 1
    print n
endwhile
"""

ADD_ASM = """\
        INP
        STA a
        INP
        ADD a
        OUT
        HLT
a       DAT
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def countdown(tmp_path):
    path = tmp_path / "countdown.lmc"
    path.write_text(COUNTDOWN)
    return path


@pytest.fixture
def add_asm(tmp_path):
    path = tmp_path / "add.asm"
    path.write_text(ADD_ASM)
    return path


# =============================================================================
# lmcc Tests
# =============================================================================

class TestLmcc:
    """Test the compiler CLI."""

    def test_default_output(self, runner, countdown):
        result = runner.invoke(lmcc.main, [str(countdown)])
        assert result.exit_code == 0, result.output
        assert "Compiled" in result.output
        asm = countdown.with_suffix(".asm").read_text()
        assert "while_0" in asm

    def test_stdout(self, runner, countdown):
        result = runner.invoke(lmcc.main, [str(countdown), "-o", "-"])
        assert result.exit_code == 0, result.output
        assert "INP" in result.output
        assert "Compiled" not in result.output
        assert not countdown.with_suffix(".asm").exists()

    def test_listing_and_mailboxes(self, runner, countdown, tmp_path):
        listing = tmp_path / "countdown.lst"
        mem = tmp_path / "countdown.mem"
        result = runner.invoke(lmcc.main, [str(countdown), "-l", str(listing), "-m", str(mem)])
        assert result.exit_code == 0, result.output
        assert "Symbol Table" in listing.read_text()
        assert parse_memory(mem.read_text())[0] == 901

    def test_ast(self, runner, countdown):
        result = runner.invoke(lmcc.main, [str(countdown), "--ast"])
        assert result.exit_code == 0, result.output
        assert "Program" in result.output
        assert not countdown.with_suffix(".asm").exists()

    def test_comments(self, runner, countdown):
        result = runner.invoke(lmcc.main, [str(countdown), "-c", "-o", "-"])
        assert "// input n" in result.output

    def test_verbose_reports_capacity(self, runner, countdown):
        result = runner.invoke(lmcc.main, [str(countdown), "-v"])
        assert result.exit_code == 0, result.output
        assert "Mailboxes used: " in result.output
        assert "/100" in result.output

    def test_semantic_error(self, runner, tmp_path):
        path = tmp_path / "bad.lmc"
        path.write_text("print y\n")
        result = runner.invoke(lmcc.main, [str(path)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "undeclared identifier 'y'" in result.output

    def test_syntax_error(self, runner, tmp_path):
        path = tmp_path / "bad.lmc"
        path.write_text("x =\n")
        result = runner.invoke(lmcc.main, [str(path)])
        assert result.exit_code == ExitCode.BUILD_ERROR

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(lmcc.main, [str(tmp_path / "missing.lmc")])
        assert result.exit_code == 2

    def test_version(self, runner):
        result = runner.invoke(lmcc.main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


# =============================================================================
# lmcasm Tests
# =============================================================================

class TestLmcasm:
    """Test the assembler CLI."""

    def test_default_output(self, runner, add_asm):
        result = runner.invoke(lmcasm.main, [str(add_asm)])
        assert result.exit_code == 0, result.output
        assert "Assembled" in result.output
        memory = parse_memory(add_asm.with_suffix(".mem").read_text())
        assert memory[:7] == [901, 306, 901, 106, 902, 0, 0]

    def test_stdout_with_disassembly(self, runner, add_asm):
        result = runner.invoke(lmcasm.main, [str(add_asm), "-d", "-o", "-"])
        assert result.exit_code == 0, result.output
        assert "01 306  STA 06" in result.output

    def test_listing(self, runner, add_asm, tmp_path):
        listing = tmp_path / "add.lst"
        result = runner.invoke(lmcasm.main, [str(add_asm), "-l", str(listing)])
        assert result.exit_code == 0, result.output
        assert "LMC Assembler Listing" in listing.read_text()

    def test_assembly_error(self, runner, tmp_path):
        path = tmp_path / "bad.asm"
        path.write_text("LDA nowhere\n")
        result = runner.invoke(lmcasm.main, [str(path)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "Assembly error" in result.output
        assert "undefined symbol 'nowhere'" in result.output


# =============================================================================
# lmcrun Tests
# =============================================================================

class TestLmcrun:
    """Test the emulator CLI."""

    def test_run_pseudocode(self, runner, countdown):
        result = runner.invoke(lmcrun.main, [str(countdown), "-i", "3"])
        assert result.exit_code == 0, result.output
        assert result.output == "2\n1\n0\n"

    def test_run_assembly(self, runner, add_asm):
        result = runner.invoke(lmcrun.main, [str(add_asm), "-i", "2", "-i", "40"])
        assert result.exit_code == 0, result.output
        assert result.output == "42\n"

    def test_run_memory_image(self, runner, tmp_path):
        path = tmp_path / "echo.mem"
        path.write_text("00 901\n01 902\n")
        result = runner.invoke(lmcrun.main, [str(path), "-i", "7"])
        assert result.exit_code == 0, result.output
        assert result.output == "7\n"

    def test_input_out_of_range(self, runner, countdown):
        result = runner.invoke(lmcrun.main, [str(countdown), "-i", "1000"])
        assert result.exit_code == 2

    def test_missing_input(self, runner, countdown):
        result = runner.invoke(lmcrun.main, [str(countdown)])
        assert result.exit_code == ExitCode.RUNTIME_ERROR
        assert "Runtime error" in result.output

    def test_step_limit(self, runner, tmp_path):
        path = tmp_path / "loop.lmc"
        path.write_text("while true\nprint 1\nendwhile\n")
        result = runner.invoke(lmcrun.main, [str(path), "-n", "20"])
        assert result.exit_code == ExitCode.RUNTIME_ERROR
        assert "did not halt within 20 steps" in result.output

    def test_bad_memory_file(self, runner, tmp_path):
        path = tmp_path / "bad.mem"
        path.write_text("not a memory image\n")
        result = runner.invoke(lmcrun.main, [str(path)])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_compile_error(self, runner, tmp_path):
        path = tmp_path / "bad.lmc"
        path.write_text("print y\n")
        result = runner.invoke(lmcrun.main, [str(path)])
        assert result.exit_code == ExitCode.BUILD_ERROR

    def test_version(self, runner):
        result = runner.invoke(lmcrun.main, ["--version"])
        assert result.exit_code == 0
        assert "lmcrun" in result.output
