"""
Coffee shop directory service.

Responsibilities:
- Serve a fixed catalog of coffee shops with free-text search and amenity filters.
- Keep session-scoped reviews in an overlay that blends with seed reviews.
- Recompute aggregate ratings from the merged review set on every read.
"""
