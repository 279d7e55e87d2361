"""Domain layer: entities, value objects, policies and repository interfaces."""
