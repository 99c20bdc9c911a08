"""
Google Places integration layer.

Responsibilities:
- Talk to the Places web service (nearby, text, details, photo).
- Infer cuisine labels from place types and names.
- Widen the search radius until enough restaurants or cuisines turn up.
- Slim upstream records into the shapes the wizard consumes.
"""
