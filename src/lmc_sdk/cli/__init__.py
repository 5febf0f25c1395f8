"""
LMC SDK Command-Line Interface
==============================

This package provides command-line tools for the LMC SDK:

- **lmcc**: pseudocode compiler
- **lmcasm**: LMC assembler
- **lmcrun**: LMC emulator

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["lmcc", "lmcasm", "lmcrun"]
