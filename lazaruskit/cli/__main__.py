"""
Entry point for running LazarusKit CLI as a module.

Usage: python -m lazaruskit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
