"""Local image preprocessing helpers."""
