"""FileDepot domain layer: entities, exceptions and services."""
