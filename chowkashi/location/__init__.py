"""
Location resolution.

Responsibilities:
- Geocode free-text addresses and postal codes through a Nominatim-style API.
- Turn a device reading or a typed location into coordinates plus a label.
"""
