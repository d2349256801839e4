"""Domain layer: entities, collaborator interfaces and session services."""
