"""
Application services.

Use cases for the catalog: load aggregates through the repository ports,
enforce cross-aggregate rules, save, publish domain events.
"""

from .categories import CategoryService, CreateCategoryCommand, UpdateCategoryCommand
from .products import (
    CreateProductCommand,
    ListProductsQuery,
    ProductService,
    UpdateProductCommand,
)
