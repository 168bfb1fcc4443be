"""
Query engine over the catalog.

Responsibilities:
- Match a free-text term against name, description, city and specialties.
- Apply AND-combined amenity facet filters.
- Return matching shops in catalog order.
"""
