"""Domain layer: pure catalog model with no framework dependencies."""
