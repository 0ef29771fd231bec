"""Domain layer - values, entities and services with no I/O."""
