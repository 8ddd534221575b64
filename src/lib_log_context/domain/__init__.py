"""Domain value objects and errors; no I/O, no dependencies on outer layers."""
