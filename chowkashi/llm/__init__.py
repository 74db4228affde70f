"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Ask the model which listing category a free-text query belongs to.
- Graceful fallback when the LLM is unavailable or returns invalid output.
"""
