"""Infrastructure layer: repository implementations."""
