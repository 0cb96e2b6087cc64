"""Infrastructure layer - persistence, external connectors, scheduling and CLI."""
