"""Shared kernel: base entity and aggregate, events, exceptions, value objects."""
