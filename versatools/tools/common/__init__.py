"""Contract, registry and streaming helpers shared by every engine."""
