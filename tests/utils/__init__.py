"""Test utilities for LazarusKit."""
