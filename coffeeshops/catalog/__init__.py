"""
Catalog layer.

Responsibilities:
- Load the seed coffee shop dataset once per process.
- Validate it into the canonical CoffeeShop schema.
- Expose an immutable, ordered view plus a pandas frame for querying.
"""
