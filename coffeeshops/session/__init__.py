"""
Session state shared by every presentation fragment.

Responsibilities:
- Hold the current search term and amenity filters.
- Own the review overlay and the undo stack of deleted reviews.
- Notify subscribers when state changes so they can re-query.
"""
