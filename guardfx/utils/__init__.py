"""GuardFX utilities."""
