"""
Entry point for running gotoolkit CLI as a module.

Usage: python -m gotoolkit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
