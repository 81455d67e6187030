"""
gotoolkit CLI module.

This module provides the command-line interface for gotoolkit.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
