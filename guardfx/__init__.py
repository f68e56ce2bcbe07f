"""GuardFX - rotating Steam Guard codes in the terminal."""

__version__ = "0.1.0"
