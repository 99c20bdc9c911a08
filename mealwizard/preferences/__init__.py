"""
Per-user cuisine preferences, kept in process memory.
"""
