"""
Entry point for running gotoolkit as a module.

Usage: python -m gotoolkit [command] [options]
"""

from gotoolkit.cli.parser import main

if __name__ == "__main__":
    main()
