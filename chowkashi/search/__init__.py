"""
Business listing search pipeline.

Responsibilities:
- Normalize backend rows into listings.
- Annotate listings with their distance from the user.
- Apply the client-side filters (radius, rating, price tier, flags).
- Sort results by the user-chosen key.
- Orchestrate location resolution, querying and ranking per request.
"""
