"""Application layer: use cases and dependency wiring."""
