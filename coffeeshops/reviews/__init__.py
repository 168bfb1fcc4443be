"""
Session review overlay and rating aggregation.

Responsibilities:
- Hold reviews contributed during a session, keyed by shop id.
- Merge them with a shop's seed reviews without duplicates.
- Derive the aggregate rating from the merged set.
"""
