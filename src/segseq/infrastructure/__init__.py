"""Infrastructure layer: database access for segment tables."""
