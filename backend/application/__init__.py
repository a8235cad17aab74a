"""Application layer: catalog use cases."""
