"""
LazarusKit - install Lazarus and Free Pascal on CI runners.
"""

__version__ = "0.1.0"
