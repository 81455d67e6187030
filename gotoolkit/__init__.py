"""
gotoolkit - keep the Go toolchain on the latest stable release.
"""

__version__ = "0.1.0"
