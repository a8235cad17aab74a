"""
Catalog Domain - Aggregates, Value Objects, and the category hierarchy.

This domain handles the product catalog:
- Products (pricing, stock, measurements, category membership)
- Categories (a tree built from parent references)
"""
