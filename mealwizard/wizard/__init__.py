"""
Three-step meal wizard.

Responsibilities:
- Step 1: remember whether the user wants to cook at home or eat out.
- Step 2: offer cuisines (location-derived when possible) and record
  rejections and acceptances.
- Step 3: assemble suggestion cards from accepted cuisines, minus anything
  matching a rejected cuisine or dismissed with "Nope".
"""
