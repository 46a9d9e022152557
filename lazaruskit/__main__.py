"""
Entry point for running LazarusKit CLI as a module.

Usage: python -m lazaruskit [command] [options]
"""

from lazaruskit.cli.parser import main

if __name__ == "__main__":
    main()
