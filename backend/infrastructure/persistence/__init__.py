"""
Persistence Package.

Repository implementations for the catalog ports.
"""

from .in_memory import InMemoryCategoryRepository, InMemoryProductRepository
