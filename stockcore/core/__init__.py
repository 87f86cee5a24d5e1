"""Core domain layer: entities, interfaces, exceptions and engine services."""
