"""Core library for packstate (no CLI imports)."""
