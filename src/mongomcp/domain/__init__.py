"""Domain layer: record type grammar, fixed question schema and the schema registry."""
