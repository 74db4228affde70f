"""
Persisted client-side state.

Responsibilities:
- Injectable key-value store with in-memory and JSON-file implementations.
- Typed accessors for custom categories, cached reviews and notes, and the
  notification prompt flag.
"""
