"""GuardFX core - code rotation and account collection management."""
