"""relinker — resolve shared-library dependencies and relink prebuilt ELF binaries."""

__version__ = "0.1.0"
