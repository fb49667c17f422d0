"""
CLI module for decoding .eml files.
"""

from qemail.cli.decode import main as decode_main

__all__ = ["decode_main"]
