"""Application layer - use cases and services orchestrating the domain."""
