"""
LazarusKit CLI module.

This module provides the command-line interface for LazarusKit.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
