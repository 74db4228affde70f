"""
Geospatial helpers for the search pipeline.

Responsibilities:
- Great-circle distance between two coordinate pairs.
- Parse coordinates embedded in stored map links.
- Derive the deterministic fallback coordinate for listings without geodata.
"""
