"""Domain layer: entities, matching rules and repository contracts."""
