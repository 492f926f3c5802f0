"""Command-line interface module for segtrip.

This module provides the ``segtrip`` command, which segments a file or
standard input and writes the delimited text to standard output.
"""

from .main import main

__all__ = ["main"]
