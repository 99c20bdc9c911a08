"""
Yelp Fusion integration layer.

Responsibilities:
- Search businesses around a point or a named area, widening the radius.
- List restaurant categories, globally or as seen around a point.
"""
